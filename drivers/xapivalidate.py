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
# xapivalidate: pre-flight checks on the objects a task refers to
#

import XenAPI

import util

# PV templates boot the distro installer through eliloader; installed PV
# guests switch to pygrub afterwards.
PV_TEMPLATE_BOOTLOADER = "eliloader"

NON_VDI_SR_TYPES = ["iso", "udev"]


class Validator(object):
    """Answers "does this object exist, and may this task touch it?".

    The predicates take an OpaqueRef and make exactly one remote read.
    The gates take a UUID, resolve it within the current session and
    return the OpaqueRef when the object is usable, None otherwise. A
    gate never runs a state predicate against an object that does not
    exist.
    """

    def __init__(self, session):
        self.session = session

    def _api(self, xapi_class):
        return getattr(self.session.xenapi, xapi_class)

    def lookup(self, xapi_class, uuid):
        if util.is_empty(uuid):
            return None
        try:
            return self._api(xapi_class).get_by_uuid(uuid)
        except XenAPI.Failure as e:
            util.XClog("validate: no %s with uuid %s (%s)" %
                       (xapi_class, uuid, e.details[0] if e.details else e))
            return None

    def ref_exists(self, xapi_class, ref):
        if util.is_empty(ref):
            return False
        try:
            self._api(xapi_class).get_uuid(ref)
            return True
        except XenAPI.Failure:
            return False

    # Predicates

    def is_template(self, vm_ref):
        return self.session.xenapi.VM.get_is_a_template(vm_ref)

    def is_control_domain(self, vm_ref):
        return self.session.xenapi.VM.get_is_control_domain(vm_ref)

    def is_paravirtual(self, vm_ref):
        bootloader = self.session.xenapi.VM.get_PV_bootloader(vm_ref)
        return bootloader == PV_TEMPLATE_BOOTLOADER

    def is_snapshot(self, vdi_ref):
        return self.session.xenapi.VDI.get_is_a_snapshot(vdi_ref)

    def is_tools_iso(self, vdi_ref):
        return self.session.xenapi.VDI.get_is_tools_iso(vdi_ref)

    def is_bootable_disk(self, vbd_ref):
        return self.session.xenapi.VBD.get_bootable(vbd_ref)

    def is_iso(self, vdi_ref):
        """Read-only images and anything that cannot be cloned (host CD
        drives, ISO library entries) are not ordinary disks."""
        allowed = self.session.xenapi.VDI.get_allowed_operations(vdi_ref)
        if "clone" not in allowed:
            return True
        return self.session.xenapi.VDI.get_read_only(vdi_ref)

    def sr_type(self, sr_ref):
        return self.session.xenapi.SR.get_type(sr_ref)

    def is_vdi_sr(self, sr_ref):
        return self.sr_type(sr_ref) not in NON_VDI_SR_TYPES

    # Gates

    def vm_usable(self, uuid):
        ref = self.lookup("VM", uuid)
        if ref is None or self.is_template(ref) or \
                self.is_control_domain(ref):
            return None
        return ref

    def vm_template_usable(self, uuid):
        ref = self.lookup("VM", uuid)
        if ref is None or not self.is_template(ref) or \
                not self.is_paravirtual(ref):
            return None
        return ref

    def vdi_usable(self, uuid):
        ref = self.lookup("VDI", uuid)
        if ref is None or not self._vdi_state_ok(ref):
            return None
        return ref

    def vdi_ref_usable(self, ref):
        return self.ref_exists("VDI", ref) and self._vdi_state_ok(ref)

    def _vdi_state_ok(self, ref):
        return not (self.is_snapshot(ref) or self.is_tools_iso(ref))

    def exists(self, xapi_class, uuid):
        return self.lookup(xapi_class, uuid)
