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
# SR: storage repositories (read-only apart from tags)
#

import taskresult
from VDI import ISO_EXCLUDE, ISO_ONLY, ISO_MODES
from XenObject import XenObject, operation

ISO_SR_TYPE = "iso"


class SR(XenObject):
    XAPI_CLASS = "SR"

    @operation
    def list(self, iso=ISO_EXCLUDE):
        """exclude: SRs that hold disks. only: ISO libraries."""
        if iso not in ISO_MODES:
            return taskresult.unsupported(iso)
        refs = self._refs()
        if iso == ISO_EXCLUDE:
            refs = [ref for ref in refs if self.validator.is_vdi_sr(ref)]
        elif iso == ISO_ONLY:
            refs = [ref for ref in refs
                    if self.validator.sr_type(ref) == ISO_SR_TYPE]
        return self._list_refs(refs)

    @operation
    def get_default(self):
        """UUID of the pool default SR, None when the pool has none."""
        return taskresult.Success(self.uuid_of("SR", self._default_sr()))
