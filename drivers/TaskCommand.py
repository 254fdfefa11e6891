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
# TaskCommand: decode a task request, run it, encode the reply
#

import sys
import json
import syslog

import util
import xc_errors
import xcconfig
import xapisession
import taskresult
import taskmonitor
import xapivalidate
from VM import VM, DEBIANLIKE, RHLIKE, SLESLIKE
from VDI import VDI
from VBD import VBD
from VIF import VIF
from Network import Network
from SR import SR

USERID_TAG = "userid:%s"

# installer kernel command lines; the kickstart/preseed URL is appended
BOOT_PREFIX = {
    DEBIANLIKE : "-- console=hvc0 ks=",
    RHLIKE     : "console=hvc0 utf8 nogpt noipv6 ks=",
    SLESLIKE   : "console=xvc0 xencons=xvc autoyast2=",
}


class Drivers(object):
    """The per-class drivers of one request, sharing its session."""

    def __init__(self, session, monitor):
        validator = xapivalidate.Validator(session)
        self.vm = VM(session, monitor, validator)
        self.vdi = VDI(session, monitor, validator)
        self.vbd = VBD(session, monitor, validator)
        self.vif = VIF(session, monitor, validator)
        self.network = Network(session, monitor, validator)
        self.sr = SR(session, monitor, validator)


def _clone_and_tag(clone, tagger, userid):
    result = clone()
    tagged = None
    if result.ok:
        tagged = tagger.add_tag(result.payload, USERID_TAG % userid)
    return [result, tagged]


def _vm_clone(d, p):
    return _clone_and_tag(
        lambda: d.vm.clone(p["src_vm"], p["new_vm_name"], p.get("sr")),
        d.vm, p["userid"])


def _vm_clone_from_template(d, p):
    distro = p["distro"]
    disk_size = None
    if not util.is_empty(p.get("disk_size")):
        disk_size = util.to_bytes(p["disk_size"], p.get("disk_unit"))
    # an unknown distro is refused by the driver itself
    pv_args = BOOT_PREFIX.get(distro, "") + p["ks_url"]
    results = _clone_and_tag(
        lambda: d.vm.clone_from_template(
            p["src_vm"], p["new_vm_name"], pv_args, p["repo_url"], distro,
            p.get("deb_distro_release"), p.get("network_ref"), disk_size),
        d.vm, p["userid"])
    memory = None
    if results[1] is not None and results[1].ok and \
            not util.is_empty(p.get("ram_size")):
        memory = d.vm.set_memory(
            results[0].payload,
            util.to_bytes(p["ram_size"], p.get("ram_unit")))
    return results + [memory]


def _network_create(d, p):
    return _clone_and_tag(lambda: d.network.create(p["network_name"]),
                          d.network, p["userid"])


def _vm_mine(d, userid):
    return d.vm.search_by_tag(USERID_TAG % userid)


TASKS = {
    "get.vm.all"            : lambda d, p: d.vm.list(),
    "get.vm.my"             : _vm_mine,
    "get.vm.templates"      : lambda d, p: d.vm.list_templates(),
    "get.vm.detail"         : lambda d, p: d.vm.get_record(p),
    "get.vm.metrics"        : lambda d, p: d.vm.get_metrics(p),
    "get.vm.runtime_data"   : lambda d, p: d.vm.get_guest_metrics(p),
    "get.vm.networks"       : lambda d, p: d.vm.get_networks(p),
    "set.vm.power_on"       : lambda d, p: d.vm.power_on(p),
    "set.vm.power_off"      : lambda d, p: d.vm.power_off(p),
    "set.vm.power_reboot"   : lambda d, p: d.vm.reboot(p),
    "set.vm.power_suspend"  : lambda d, p: d.vm.suspend(p),
    "set.vm.power_resume"   : lambda d, p: d.vm.resume(p),
    "set.vm.name"           : lambda d, p: d.vm.set_name(p["vm"], p["name"]),
    "set.vm.tag"            : lambda d, p: d.vm.add_tag(p["vm"], p["tag"]),
    "no.set.vm.tag"         : lambda d, p: d.vm.remove_tag(p["vm"], p["tag"]),
    "set.vm.ram"            : lambda d, p: d.vm.set_memory(
        p["vm"], util.to_bytes(p["ram_size"], p.get("ram_unit"))),
    "do.vm.clone"           : _vm_clone,
    "do.vm.clone.from_template" : _vm_clone_from_template,
    "do.vm.destroy"         : lambda d, p: d.vm.destroy(p),
    "get.network.all"       : lambda d, p: d.network.list(),
    "do.network.create"     : _network_create,
    "do.network.destroy"    : lambda d, p: d.network.destroy(p),
    "set.network.tag"       : lambda d, p: d.network.add_tag(p["ref"],
                                                             p["tag"]),
    "no.set.network.tag"    : lambda d, p: d.network.remove_tag(p["ref"],
                                                                p["tag"]),
    "do.vif.create"         : lambda d, p: d.vif.create(p["vm"], p["net"],
                                                        p["vm_slot"]),
    "do.vif.destroy"        : lambda d, p: d.vif.destroy(p),
    "do.vif.plug"           : lambda d, p: d.vif.plug(p),
    "do.vif.unplug"         : lambda d, p: d.vif.unplug(p),
    "get.vdi.all"           : lambda d, p: d.vdi.list(),
    "do.vdi.resize"         : lambda d, p: d.vdi.resize(
        p["vdi_ref"], util.to_bytes(p["vdi_size"], p.get("vdi_unit"))),
    "set.vdi.tag"           : lambda d, p: d.vdi.add_tag(p["ref"], p["tag"]),
    "no.set.vdi.tag"        : lambda d, p: d.vdi.remove_tag(p["ref"],
                                                            p["tag"]),
    "do.vdi.destroy"        : lambda d, p: d.vdi.destroy(p),
    "do.vbd.create"         : lambda d, p: d.vbd.create(p["vm_ref"],
                                                        p["vdi_ref"],
                                                        p["vm_slot"]),
    "get.sr.all"            : lambda d, p: d.sr.list(),
}


class Request(object):
    def __init__(self, task, payload, seq, taskid):
        self.task = task
        self.payload = payload
        self.seq = seq
        self.taskid = taskid


class TaskCommand(object):
    """Runs one request per call to process(), each on its own session.

    cancel, when given, is a threading.Event shared by every wait on a
    remote task; setting it abandons the waits in progress.
    """

    def __init__(self, config, manager=None, cancel=None):
        self.config = config
        if manager is None:
            manager = xapisession.SessionManager(config)
        self.manager = manager
        self.cancel = cancel

    def parse(self, body):
        try:
            parsed = json.loads(body)
            return Request(parsed["task"], parsed.get("payload"),
                           parsed.get("id"), parsed.get("uuid"))
        except (ValueError, TypeError, KeyError) as e:
            util.XClog("Failed to parse request; exception = %s" % e)
            raise xc_errors.XenError('BadRequest', opterr=str(e))

    @util.retried(backoff=5, limit=3)
    def login(self):
        try:
            return self.manager.login()
        except OSError as e:
            raise util.RetryLoop.TransientFailure(e)

    def run(self, session, request):
        handler = TASKS.get(request.task)
        if handler is None:
            util.XClog("Unknown task: %s" % request.task)
            return taskresult.undefined(request.task)

        monitor = taskmonitor.TaskMonitor(session,
                                          interval=self.config.task_interval,
                                          timeout=self.config.task_timeout,
                                          cancel=self.cancel)
        util.XClog("task %s: %s %s" % (request.taskid, request.task,
                                       util.hide_secrets(request.payload)))
        try:
            return handler(Drivers(session, monitor), request.payload)
        except (KeyError, TypeError, ValueError) as e:
            util.logException(request.task)
            return taskresult.unsupported("bad payload: %s" % e)

    def _execute(self, request):
        try:
            session = self.login()
        except (xc_errors.ClientError, OSError) as e:
            util.XClog("task %s: no session: %s" % (request.taskid, e),
                       priority=syslog.LOG_ERR)
            return taskresult.unsupported(str(e))
        try:
            return self.run(session, request)
        finally:
            self.manager.logout(session)

    def process(self, body, correlation_id):
        """Handle one raw request body. Returns the JSON reply and the
        correlation id it must be delivered with."""
        try:
            request = self.parse(body)
        except xc_errors.ClientError as e:
            request = Request(None, None, None, None)
            result = taskresult.unsupported(str(e))
        else:
            result = self._execute(request)

        reply = {
            "seq"       : request.seq,
            "taskid"    : request.taskid,
            "timestamp" : util.timestamp(),
            "payload"   : taskresult.encode(result),
        }
        return json.dumps(reply), correlation_id


def main(argv=None):
    """Usage: TaskCommand [body [correlation-id]]. Reads the request from
    stdin when no body is given and prints the reply."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        config = xcconfig.Config.from_env()
    except xc_errors.ClientError as e:
        sys.stderr.write("%s\n" % e)
        return 1

    body = argv[0] if argv else sys.stdin.read()
    correlation_id = argv[1] if len(argv) > 1 else None
    reply, _ = TaskCommand(config).process(body, correlation_id)
    print(reply)
    return 0


if __name__ == '__main__':
    sys.exit(main())
