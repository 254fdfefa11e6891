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
# taskmonitor: drive an Async.* call to completion
#

import time
import xmlrpc.client
from xml.parsers.expat import ExpatError

import XenAPI

import util
import xc_errors
import taskresult

POLL_INTERVAL = 5  # seconds

STATUS_PENDING = "pending"
STATUS_CANCELLING = "cancelling"
STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"
STATUS_CANCELLED = "cancelled"

NON_TERMINAL = [STATUS_PENDING, STATUS_CANCELLING]

# what task.destroy and task.cancel may raise without touching the result
CLEANUP_ERRORS = (XenAPI.Failure, OSError, xmlrpc.client.Error)

RESPONSE_WRAPPER = "<methodResponse><params><param>%s</param></params>" \
                   "</methodResponse>"


class PayloadError(Exception):
    """task.get_result returned something that is not an XML-RPC value"""
    pass


def decode_result(raw):
    """task.get_result hands back the result as a bare XML-RPC <value>
    fragment; unwrap it. An empty result decodes to None."""
    if util.is_empty(raw):
        return None
    try:
        params, _ = xmlrpc.client.loads(RESPONSE_WRAPPER % raw)
    except (ExpatError, xmlrpc.client.ResponseError, ValueError,
            TypeError) as e:
        raise PayloadError("cannot decode task result %r: %s" % (raw, e))
    if len(params) != 1:
        raise PayloadError("task result %r is not a single value" % raw)
    return params[0]


class TaskMonitor(object):
    """Submits long-running operations and waits for them.

    The wait blocks the calling thread. With timeout set, a task still
    pending after that many seconds is cancelled on the remote side and
    reported as Unknown(TASK_TIMEOUT); setting the cancel event does the
    same immediately and reports Unknown(TASK_CANCELLED). A task that
    reached a terminal state is destroyed exactly once.
    """

    def __init__(self, session, interval=POLL_INTERVAL, timeout=None,
                 cancel=None):
        self.session = session
        self.interval = interval
        self.timeout = timeout
        self.cancel = cancel

    def submit(self, method, *args, **kwargs):
        want_result = kwargs.pop("want_result", False)
        if kwargs:
            raise TypeError("unexpected arguments %s" % list(kwargs))
        try:
            task_ref = method(*args)
        except XenAPI.Failure as e:
            util.XClog("task: submission failed: %s" % e.details)
            return taskresult.failure(e.details)
        util.XClog("task: submitted %s" % task_ref)
        return self.run(task_ref, want_result)

    def run(self, task_ref, want_result=False):
        status = self._wait(task_ref)
        if status in NON_TERMINAL:
            return self._abandon(task_ref)

        util.XClog("task: %s finished with status %s" % (task_ref, status))
        try:
            if status == STATUS_SUCCESS:
                result = self._success(task_ref, want_result)
            else:
                result = self._failure(task_ref)
        finally:
            self._destroy(task_ref)
        return result

    def _wait(self, task_ref):
        deadline = None
        if self.timeout is not None:
            deadline = time.monotonic() + self.timeout

        status = self._status(task_ref)
        while status in NON_TERMINAL:
            if deadline is not None and time.monotonic() >= deadline:
                break
            if self._sleep():
                break
            status = self._status(task_ref)
        return status

    def _sleep(self):
        """Wait one interval; True if the caller asked us to stop."""
        if self.cancel is not None:
            return self.cancel.wait(self.interval)
        time.sleep(self.interval)
        return False

    def _status(self, task_ref):
        return self.session.xenapi.task.get_status(task_ref)

    def _success(self, task_ref, want_result):
        if not want_result:
            return taskresult.Success()
        raw = self.session.xenapi.task.get_result(task_ref)
        try:
            return taskresult.Success(decode_result(raw))
        except PayloadError as e:
            util.XClog("task: %s" % e)
            return taskresult.unsupported(str(e))

    def _failure(self, task_ref):
        info = self.session.xenapi.task.get_error_info(task_ref)
        if not info:
            info = [xc_errors.TASK_CANCELLED]
        util.XClog("task: %s failed: %s" % (task_ref, info))
        return taskresult.failure(info)

    def _destroy(self, task_ref):
        try:
            self.session.xenapi.task.destroy(task_ref)
        except CLEANUP_ERRORS as e:
            util.XClog("task: failed to destroy %s (ignored): %s" %
                       (task_ref, e))

    def _abandon(self, task_ref):
        cancelled = self.cancel is not None and self.cancel.is_set()
        code = xc_errors.TASK_CANCELLED if cancelled else xc_errors.TASK_TIMEOUT
        util.XClog("task: giving up on %s (%s), cancelling it" %
                   (task_ref, code))
        try:
            self.session.xenapi.task.cancel(task_ref)
        except CLEANUP_ERRORS as e:
            util.XClog("task: failed to cancel %s (ignored): %s" %
                       (task_ref, e))
        return taskresult.failure([code, task_ref])
