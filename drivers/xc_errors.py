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
# Error kinds, remote error translation and client error codes
#

import errno
import collections

import util

NOT_PERMITTED = "NotPermitted"
UNDEFINED = "Undefined"
UNSUPPORTED = "Unsupported"
BAD_POWER_STATE = "BadPowerState"
TRY_LATER = "TryLater"
DISK_FULL = "DiskFull"
UNKNOWN = "Unknown"

KINDS = [NOT_PERMITTED, UNDEFINED, UNSUPPORTED, BAD_POWER_STATE, TRY_LATER,
         DISK_FULL, UNKNOWN]

# Envelope descriptions, one per kind. Unknown carries the remote code.
DESCRIPTIONS = {
    NOT_PERMITTED   : "ACTION_NOT_PERMITTED",
    UNDEFINED       : "ACTION_NOT_DEFINED",
    UNSUPPORTED     : "UNSUPPORTED",
    BAD_POWER_STATE : "VM_BAD_POWER_STATE",
    TRY_LATER       : "OTHER_OPERATION_IN_PROGRESS",
    DISK_FULL       : "DISK_FULL_CONTACT_ADMINISTRATOR",
}

REMOTE_CODES = {
    "VM_BAD_POWER_STATE"          : BAD_POWER_STATE,
    "OTHER_OPERATION_IN_PROGRESS" : TRY_LATER,
    "OPERATION_NOT_ALLOWED"       : NOT_PERMITTED,
    "SR_FULL"                     : DISK_FULL,
}

# Local codes fed through translate() for conditions the remote end
# never reports itself.
TASK_TIMEOUT = "TASK_TIMEOUT"
TASK_CANCELLED = "TASK_CANCELLED"
CONNECTION_FAILED = "CONNECTION_FAILED"


class ErrorKind(collections.namedtuple("ErrorKind", "name code")):
    """One of the closed set of error kinds. Only Unknown has a code."""

    __slots__ = ()

    def __new__(cls, name, code=None):
        if name not in KINDS:
            raise ValueError("not an error kind: %r" % name)
        return super(ErrorKind, cls).__new__(cls, name, code)

    @property
    def description(self):
        if self.name == UNKNOWN:
            return self.code
        return DESCRIPTIONS[self.name]

    def __str__(self):
        if self.name == UNKNOWN:
            return "%s(%s)" % (self.name, self.code)
        return self.name


NotPermitted = ErrorKind(NOT_PERMITTED)
Undefined = ErrorKind(UNDEFINED)
Unsupported = ErrorKind(UNSUPPORTED)
BadPowerState = ErrorKind(BAD_POWER_STATE)
TryLater = ErrorKind(TRY_LATER)
DiskFull = ErrorKind(DISK_FULL)


def Unknown(code):
    return ErrorKind(UNKNOWN, code)


def translate(code):
    """Map a remote error code onto an ErrorKind. Total: anything not in
    the table is Unknown(code) with the code preserved."""
    name = REMOTE_CODES.get(code)
    if name is None:
        return Unknown(code)
    return ErrorKind(name)


class ClientError(Exception):
    """Fatal client-side condition: bad configuration or failed login"""
    errno = errno.EINVAL

    def __init__(self, errno, reason):
        self.errno = errno
        Exception.__init__(self, reason)


# Fatal errors, raised rather than returned
ERRORLIST = {
    "ConfigMissing"      : (10, "A required configuration value is not set"),
    "ConfigInvalid"      : (11, "A configuration value is malformed"),
    "SessionLoginFailed" : (20, "Failed to log in to the management endpoint"),
    "SessionRedirectLoop": (21, "Pool master redirect did not lead to the master"),
    "BadRequest"         : (30, "Failed to parse the task request"),
}


def XenError(key, opterr=None):
    """Raise the ClientError registered under key."""
    if key in ERRORLIST:
        errorcode, errormessage = ERRORLIST[key]
        if opterr is not None:
            errormessage += " [opterr=%s]" % opterr
        util.XClog("Raising exception [%d, %s]" % (errorcode, errormessage))
        raise ClientError(errorcode, errormessage)

    # development error
    raise ClientError(1, "Error reporting error, unknown key %s" % key)
