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
# VBD: attach disks to guests
#

import util
import taskresult
from XenObject import XenObject, operation


class VBD(XenObject):
    XAPI_CLASS = "VBD"

    @operation
    def create(self, vm_uuid, vdi_uuid, userdevice):
        """Attach a VDI read-write as a plain data disk. Payload: the new
        VBD's UUID."""
        vm_ref = self.validator.vm_usable(vm_uuid)
        vdi_ref = None
        if vm_ref is not None:
            vdi_ref = self.validator.vdi_usable(vdi_uuid)
        if vdi_ref is None or util.is_empty(userdevice):
            return taskresult.not_permitted()
        ref = self.api.create({
            "VM"                   : vm_ref,
            "VDI"                  : vdi_ref,
            "userdevice"           : str(userdevice),
            "bootable"             : False,
            "mode"                 : "RW",
            "type"                 : "Disk",
            "empty"                : False,
            "other_config"         : {},
            "qos_algorithm_type"   : "",
            "qos_algorithm_params" : {}})
        uuid = self.api.get_uuid(ref)
        util.XClog("VBD %s: VDI %s attached to VM %s as %s" %
                   (uuid, vdi_uuid, vm_uuid, userdevice))
        return taskresult.Success(uuid)

    @operation
    def destroy(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        self.api.destroy(ref)
        return taskresult.Success()
