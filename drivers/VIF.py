#!/usr/bin/python3
#
# Copyright (C) Citrix Systems Inc.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as published
# by the Free Software Foundation; version 2.1 only.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program; if not, write to the Free Software Foundation, Inc.,
# 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301  USA
#
# VIF: guest network interfaces
#

import util
import taskresult
from XenObject import XenObject, operation

DEFAULT_MTU = "1500"


class VIF(XenObject):
    XAPI_CLASS = "VIF"

    @operation
    def create(self, vm_uuid, network_uuid, device):
        """Add interface number device on the given network; the MAC is
        generated by the host. Payload: the new VIF's UUID."""
        vm_ref = self.validator.vm_usable(vm_uuid)
        network_ref = None
        if vm_ref is not None:
            network_ref = self.validator.exists("network", network_uuid)
        if network_ref is None or util.is_empty(device):
            return taskresult.not_permitted()
        ref = self.api.create({
            "device"               : str(device),
            "network"              : network_ref,
            "VM"                   : vm_ref,
            "MAC"                  : "",
            "MTU"                  : DEFAULT_MTU,
            "other_config"         : {},
            "qos_algorithm_type"   : "",
            "qos_algorithm_params" : {}})
        uuid = self.api.get_uuid(ref)
        util.XClog("VIF %s: created on VM %s, network %s" %
                   (uuid, vm_uuid, network_uuid))
        return taskresult.Success(uuid)

    def _call(self, uuid, verb):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        getattr(self.api, verb)(ref)
        return taskresult.Success()

    @operation
    def destroy(self, uuid):
        return self._call(uuid, "destroy")

    @operation
    def plug(self, uuid):
        return self._call(uuid, "plug")

    @operation
    def unplug(self, uuid):
        return self._call(uuid, "unplug")
