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
# taskresult: operation results and their reply envelope
#

import xc_errors

STATUS_SUCCESS = "Success"
STATUS_ERROR = "Error"
NO_DESCRIPTION = "NO_DESCRIPTION"


class Result(object):
    ok = False

    def __ne__(self, other):
        return not self == other


class Success(Result):
    ok = True

    def __init__(self, payload=None):
        self.payload = payload

    def __eq__(self, other):
        return isinstance(other, Success) and self.payload == other.payload

    def __repr__(self):
        return "Success(%r)" % (self.payload,)


class Error(Result):

    def __init__(self, kind, detail=None):
        self.kind = kind
        self.detail = detail

    def __eq__(self, other):
        return isinstance(other, Error) and self.kind == other.kind and \
            self.detail == other.detail

    def __repr__(self):
        return "Error(%s, %r)" % (self.kind, self.detail)


def not_permitted(detail=None):
    return Error(xc_errors.NotPermitted, detail)


def unsupported(detail=None):
    return Error(xc_errors.Unsupported, detail)


def undefined(detail=None):
    return Error(xc_errors.Undefined, detail)


def failure(details):
    """Build the Error result for a remote error description list, as
    found in XenAPI.Failure.details and task.get_error_info."""
    details = list(details or [])
    code = details[0] if details else None
    return Error(xc_errors.translate(code), details)


class EnvelopeError(Exception):
    pass


def encode(result):
    """Encode a result, or a list of results, into the reply envelope."""
    if isinstance(result, (list, tuple)):
        return [encode(r) for r in result]
    if result is None:
        return None
    if result.ok:
        return {"Status": STATUS_SUCCESS,
                "Description": NO_DESCRIPTION,
                "Value": result.payload}
    return {"Status": STATUS_ERROR,
            "Description": result.kind.description,
            "Kind": result.kind.name,
            "Value": result.detail}


def decode(envelope):
    if isinstance(envelope, list):
        return [decode(e) for e in envelope]
    if envelope is None:
        return None
    try:
        status = envelope["Status"]
        if status == STATUS_SUCCESS:
            return Success(envelope.get("Value"))
        if status == STATUS_ERROR:
            name = envelope["Kind"]
            code = None
            if name == xc_errors.UNKNOWN:
                code = envelope["Description"]
            return Error(xc_errors.ErrorKind(name, code), envelope.get("Value"))
    except (KeyError, TypeError, ValueError) as e:
        raise EnvelopeError("malformed envelope %r: %s" % (envelope, e))
    raise EnvelopeError("unknown status %r" % (status,))
