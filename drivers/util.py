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
# Miscellaneous utility functions
#

import os
import sys
import time
import syslog
import traceback
import datetime

LOGGING = True
LOG_IDENT = "xcpctl"
_XC_SYSLOG_FACILITY = syslog.LOG_LOCAL2

SECRET_KEYS = ["password", "XAPI_PASS"]

KiB = 1024
MiB = KiB * KiB
GiB = KiB * MiB

SIZE_UNITS = {
    "K": KiB,
    "M": MiB,
    "G": GiB,
}


def _logToSyslog(ident, facility, priority, message):
    syslog.openlog(ident, 0, facility)
    syslog.syslog(priority, "[%d] %s" % (os.getpid(), message))
    syslog.closelog()


def XClog(message, ident=LOG_IDENT, priority=syslog.LOG_INFO):
    if LOGGING:
        for message_line in str(message).split('\n'):
            _logToSyslog(ident, _XC_SYSLOG_FACILITY, priority, message_line)


def logException(tag):
    info = sys.exc_info()
    if info[0] is SystemExit:
        # this should not be happening when catching "Exception", but it is
        sys.exit(0)
    tb = "".join(traceback.format_tb(info[2]))
    msg = "***** %s: EXCEPTION %s, %s\n%s" % (tag, info[0], info[1], tb)
    msg = msg.replace("\n", "\n** ")
    XClog(msg, priority=syslog.LOG_ERR)


def hide_secrets(params):
    """Return a copy of a request/config dict that is safe to log."""
    if not isinstance(params, dict):
        return params
    safe = {}
    for key, value in params.items():
        if key in SECRET_KEYS:
            value = "******"
        elif isinstance(value, dict):
            value = hide_secrets(value)
        safe[key] = value
    return safe


def is_empty(value):
    return value is None or value == ''


def to_bytes(number, unit):
    """Convert a size given as number + unit letter ('G', 'M', 'K') to
    bytes. A missing unit means the number is already in bytes."""
    if is_empty(unit):
        return int(number)
    try:
        return int(number) * SIZE_UNITS[str(unit).upper()]
    except KeyError:
        raise ValueError("unknown size unit %r" % unit)


def timestamp():
    return datetime.datetime.now().isoformat()


class RetryLoop(object):

    def __init__(self, backoff, limit):
        self.backoff = backoff
        self.limit   = limit

    def __call__(self, f):

        def loop(*__t, **__d):
            attempt = 0

            while True:
                attempt += 1

                try:
                    return f(*__t, **__d)

                except self.TransientFailure as e:
                    e = e.exception

                    if attempt >= self.limit: raise e

                    XClog("%s: attempt %d failed (%s), retrying in %ds" %
                          (f.__name__, attempt, e, self.backoff))
                    time.sleep(self.backoff)

        loop.__name__ = f.__name__
        return loop

    class TransientFailure(Exception):
        def __init__(self, exception):
            Exception.__init__(self, str(exception))
            self.exception = exception

def retried(**args): return RetryLoop(**args)
