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
# Network: internal (host-only) networks
#

import util
import taskresult
from XenObject import XenObject, operation

DEFAULT_MTU = "1500"


class Network(XenObject):
    XAPI_CLASS = "network"

    @operation
    def create(self, name):
        """A network with no PIF, so traffic stays inside the pool.
        Payload: the new network's UUID."""
        if util.is_empty(name):
            return taskresult.not_permitted()
        ref = self.api.create({
            "name_label"       : name,
            "name_description" : "",
            "MTU"              : DEFAULT_MTU,
            "other_config"     : {}})
        uuid = self.api.get_uuid(ref)
        util.XClog("network %s: created (%s)" % (uuid, name))
        return taskresult.Success(uuid)

    @operation
    def destroy(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        self.api.destroy(ref)
        util.XClog("network %s: destroyed" % uuid)
        return taskresult.Success()
