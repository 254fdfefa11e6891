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
# VDI: virtual disk tasks
#

import util
import taskresult
from XenObject import XenObject, operation

ISO_EXCLUDE = "exclude"
ISO_INCLUDE = "include"
ISO_ONLY = "only"
ISO_MODES = [ISO_EXCLUDE, ISO_INCLUDE, ISO_ONLY]


class VDI(XenObject):
    XAPI_CLASS = "VDI"

    def usable(self, uuid):
        return self.validator.vdi_usable(uuid)

    @operation
    def list(self, iso=ISO_EXCLUDE):
        """Ordinary disks. Snapshots and the tools ISO are never listed;
        iso decides what happens to other read-only images."""
        if iso not in ISO_MODES:
            return taskresult.unsupported(iso)
        refs = []
        for ref in self._refs():
            if self.validator.is_snapshot(ref) or \
                    self.validator.is_tools_iso(ref):
                continue
            if iso == ISO_INCLUDE or \
                    self.validator.is_iso(ref) == (iso == ISO_ONLY):
                refs.append(ref)
        return self._list_refs(refs)

    @operation
    def list_snapshots(self):
        return self._list_refs([ref for ref in self._refs()
                                if self.validator.is_snapshot(ref)])

    @operation
    def list_tools(self):
        return self._list_refs([ref for ref in self._refs()
                                if self.validator.is_tools_iso(ref)])

    @operation
    def resize(self, uuid, size):
        ref = self.usable(uuid)
        if ref is None or not size:
            return taskresult.not_permitted()
        util.XClog("VDI %s: resize to %s bytes" % (uuid, size))
        self.api.resize_online(ref, str(size))
        return taskresult.Success()

    @operation
    def destroy(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        util.XClog("VDI %s: destroy" % uuid)
        return self.monitor.submit(self.async_api.destroy, ref)
