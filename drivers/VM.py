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
# VM: virtual machine tasks
#

import syslog

import util
import taskresult
import xapirecords
import xapivalidate
from XenObject import XenObject, operation, NULL_REF

DEBIANLIKE = "debianlike"
RHLIKE = "rhlike"
SLESLIKE = "sleslike"
DISTROS = [DEBIANLIKE, RHLIKE, SLESLIKE]

ROOT_DEVICE = "xvda"
PROVISION_SPEC = "<provision><disk device='0' size='%d' sr='%s' " \
                 "bootable='true' type='system'/></provision>"

KEY_DISKS = "disks"
KEY_REPOSITORY = "install-repository"
KEY_DEBIAN_RELEASE = "debian-release"


class VM(XenObject):
    """Guest lifecycle. Every verb refuses templates and dom0 except the
    template ones, which accept PV templates only."""

    XAPI_CLASS = "VM"

    def usable(self, uuid):
        return self.validator.vm_usable(uuid)

    def _uuid(self, ref):
        return self.api.get_uuid(ref)

    def _records(self):
        return [xapirecords.decode("VM", raw)
                for raw in self.api.get_all_records().values()]

    @operation
    def list(self):
        return taskresult.Success([
            rec.uuid for rec in self._records()
            if not rec.is_a_template and not rec.is_control_domain])

    @operation
    def list_templates(self):
        return taskresult.Success([
            rec.uuid for rec in self._records()
            if rec.is_a_template and
            rec.PV_bootloader == xapivalidate.PV_TEMPLATE_BOOTLOADER])

    @operation
    def search_templates_by_tag(self, tag):
        return self._search_by_tag(self.list_templates(), tag)

    @operation
    def get_template_record(self, uuid):
        ref = self.validator.vm_template_usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        record = xapirecords.decode("VM", self.api.get_record(ref),
                                    self.uuid_of)
        return taskresult.Success(record.to_dict())

    # Runtime data

    @operation
    def get_metrics(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        metrics = self.api.get_metrics(ref)
        raw = self.session.xenapi.VM_metrics.get_record(metrics)
        return taskresult.Success(
            xapirecords.decode("VM_metrics", raw).to_dict())

    def _guest_metrics(self, ref):
        metrics = self.api.get_guest_metrics(ref)
        if metrics == NULL_REF:
            # no guest tools, or the VM never ran
            return None
        return metrics

    @operation
    def get_guest_metrics(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        metrics = self._guest_metrics(ref)
        if metrics is None:
            return taskresult.Success(None)
        raw = self.session.xenapi.VM_guest_metrics.get_record(metrics)
        return taskresult.Success(
            xapirecords.decode("VM_guest_metrics", raw).to_dict())

    @operation
    def get_networks(self, uuid):
        """Addresses reported by the guest tools, keyed "<dev>/ip"."""
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        metrics = self._guest_metrics(ref)
        if metrics is None:
            return taskresult.Success({})
        networks = self.session.xenapi.VM_guest_metrics.get_networks(metrics)
        return taskresult.Success(dict(networks))

    @operation
    def get_vbds(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        return taskresult.Success([self.session.xenapi.VBD.get_uuid(vbd)
                                   for vbd in self.api.get_VBDs(ref)])

    @operation
    def get_vifs(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        return taskresult.Success([self.session.xenapi.VIF.get_uuid(vif)
                                   for vif in self.api.get_VIFs(ref)])

    # Power

    def _power(self, uuid, verb, *args):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        util.XClog("VM %s: %s" % (uuid, verb))
        return self.monitor.submit(getattr(self.async_api, verb), ref, *args)

    @operation
    def power_on(self, uuid):
        return self._power(uuid, "start", False, False)

    @operation
    def power_off(self, uuid):
        return self._power(uuid, "shutdown")

    @operation
    def reboot(self, uuid):
        return self._power(uuid, "hard_reboot")

    @operation
    def suspend(self, uuid):
        return self._power(uuid, "suspend")

    @operation
    def resume(self, uuid):
        return self._power(uuid, "resume", False, False)

    # Copy and removal

    def _copy(self, ref, name, sr_ref):
        result = self.monitor.submit(self.async_api.copy, ref, name, sr_ref,
                                     want_result=True)
        if not result.ok:
            return result
        new_ref = result.payload
        return taskresult.Success((new_ref, self._uuid(new_ref)))

    @operation
    def clone(self, uuid, name, sr_uuid=None):
        """Full copy of a halted VM. The new VM lands on the source's SR
        unless sr_uuid names another one. Payload: the new VM's UUID."""
        ref = self.usable(uuid)
        if ref is None or util.is_empty(name):
            return taskresult.not_permitted()
        sr_ref = NULL_REF
        if sr_uuid is not None:
            sr_ref = self.validator.exists("SR", sr_uuid)
            if sr_ref is None:
                return taskresult.not_permitted()

        result = self._copy(ref, name, sr_ref)
        if not result.ok:
            return result
        new_ref, new_uuid = result.payload
        util.XClog("VM %s: cloned to %s (%s)" % (uuid, new_uuid, name))
        return taskresult.Success(new_uuid)

    @operation
    def clone_from_template(self, uuid, name, pv_args, repo_url, distro,
                            distro_release=None, network_uuid=None,
                            disk_size=None):
        """Instantiate a PV template for a network install.

        The copy goes onto the pool default SR. The installer is then
        pointed at repo_url through other_config, and pv_args becomes the
        installer's kernel command line. Nothing is rolled back when a
        configuration step fails: the new VM is left as is and its UUID is
        logged. Payload: the new VM's UUID.
        """
        if distro not in DISTROS:
            return taskresult.unsupported(distro)
        ref = self.validator.vm_template_usable(uuid)
        if ref is None or util.is_empty(name) or util.is_empty(repo_url):
            return taskresult.not_permitted()
        if repo_url.startswith("https://"):
            return taskresult.not_permitted(repo_url)
        network_ref = None
        if not util.is_empty(network_uuid):
            network_ref = self.validator.exists("network", network_uuid)
            if network_ref is None:
                return taskresult.not_permitted()

        sr_ref = self._default_sr()
        result = self._copy(ref, name, sr_ref)
        if not result.ok:
            return result
        new_ref, new_uuid = result.payload
        util.XClog("VM %s: instantiated template %s as %s" %
                   (new_uuid, uuid, name))

        result = self._configure(new_ref, sr_ref, pv_args, repo_url, distro,
                                 distro_release, network_ref, disk_size)
        if not result.ok:
            util.XClog("VM %s: left partially configured: %s" %
                       (new_uuid, result), priority=syslog.LOG_ERR)
            return result
        return taskresult.Success(new_uuid)

    @operation
    def _configure(self, ref, sr_ref, pv_args, repo_url, distro,
                   distro_release, network_ref, disk_size):
        if disk_size is not None:
            sr_uuid = self.session.xenapi.SR.get_uuid(sr_ref)
            self._set_other_config(ref, KEY_DISKS,
                                   PROVISION_SPEC % (disk_size, sr_uuid))
            self.api.provision(ref)
        self.api.set_is_a_template(ref, False)
        self.api.set_PV_args(ref, pv_args)
        self._set_other_config(ref, KEY_REPOSITORY, repo_url)
        if distro == DEBIANLIKE:
            self._set_other_config(ref, KEY_DEBIAN_RELEASE,
                                   distro_release or "")
        if network_ref is not None:
            self.session.xenapi.VIF.create({
                "device"               : "0",
                "network"              : network_ref,
                "VM"                   : ref,
                "MAC"                  : "",
                "MTU"                  : "1500",
                "other_config"         : {},
                "qos_algorithm_type"   : "",
                "qos_algorithm_params" : {}})
        return taskresult.Success()

    def _root_disk(self, ref):
        for vbd in self.api.get_VBDs(ref):
            record = self.session.xenapi.VBD.get_record(vbd)
            if record.get("type") == "Disk" and \
                    record.get("device") == ROOT_DEVICE:
                return record["VDI"]
        return None

    @operation
    def destroy(self, uuid):
        """Destroy the VM, then its root disk. Other disks stay."""
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        vdi_ref = self._root_disk(ref)

        result = self.monitor.submit(self.async_api.destroy, ref)
        if not result.ok:
            return result
        util.XClog("VM %s: destroyed" % uuid)

        if vdi_ref is None or not self.validator.vdi_ref_usable(vdi_ref):
            return taskresult.Success()
        result = self.monitor.submit(self.session.xenapi.Async.VDI.destroy,
                                     vdi_ref)
        if not result.ok:
            util.XClog("VM %s: root disk %s not removed: %s" %
                       (uuid, vdi_ref, result), priority=syslog.LOG_ERR)
        return result

    # Configuration

    def _set_other_config(self, ref, key, value):
        self.api.remove_from_other_config(ref, key)
        self.api.add_to_other_config(ref, key, value)

    @operation
    def add_other_config(self, uuid, key, value):
        ref = self.usable(uuid)
        if ref is None or util.is_empty(key):
            return taskresult.not_permitted()
        self.api.add_to_other_config(ref, key, value)
        return taskresult.Success()

    @operation
    def remove_other_config(self, uuid, key):
        ref = self.usable(uuid)
        if ref is None or util.is_empty(key):
            return taskresult.not_permitted()
        self.api.remove_from_other_config(ref, key)
        return taskresult.Success()

    @operation
    def set_other_config(self, uuid, key, value):
        ref = self.usable(uuid)
        if ref is None or util.is_empty(key):
            return taskresult.not_permitted()
        self._set_other_config(ref, key, value)
        return taskresult.Success()

    @operation
    def get_other_config(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        return taskresult.Success(dict(self.api.get_other_config(ref)))

    @operation
    def set_name(self, uuid, name):
        ref = self.usable(uuid)
        if ref is None or util.is_empty(name):
            return taskresult.not_permitted()
        self.api.set_name_label(ref, name)
        return taskresult.Success()

    @operation
    def set_memory(self, uuid, size):
        ref = self.usable(uuid)
        if ref is None or not size:
            return taskresult.not_permitted()
        self.api.set_memory_static_max(ref, str(size))
        self.api.set_memory_dynamic_max(ref, str(size))
        return taskresult.Success()
