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
# XenObject: base class for the per-class task drivers
#

import xmlrpc.client

import XenAPI

import util
import xc_errors
import taskresult
import taskmonitor
import xapirecords
import xapivalidate

NULL_REF = xapirecords.NULL_REF


def operation(op):
    """Turn whatever escapes a task verb into an Error result, so that
    callers only ever see Success or Error."""
    def wrapper(self, *args, **kwargs):
        try:
            return op(self, *args, **kwargs)
        except XenAPI.Failure as e:
            util.logException("%s.%s" % (self.XAPI_CLASS, op.__name__))
            return taskresult.failure(e.details)
        except (xapirecords.RecordError, taskmonitor.PayloadError) as e:
            util.logException("%s.%s" % (self.XAPI_CLASS, op.__name__))
            return taskresult.unsupported(str(e))
        except (OSError, xmlrpc.client.ProtocolError) as e:
            util.logException("%s.%s" % (self.XAPI_CLASS, op.__name__))
            return taskresult.failure([xc_errors.CONNECTION_FAILED, str(e)])

    wrapper.__name__ = op.__name__
    wrapper.__doc__ = op.__doc__
    return wrapper


class XenObject(object):
    """Semi-abstract task driver for one XenAPI class.

    Attributes:
      session: the xapisession.Session every call goes through
      validator: pre-flight checks bound to the same session
      monitor: waits for the Async.* calls issued by this driver

    Callers name objects by UUID. OpaqueRefs are looked up per call and
    never kept on the driver.
    """

    XAPI_CLASS = None

    def __init__(self, session, monitor=None, validator=None):
        self.session = session
        if monitor is None:
            monitor = taskmonitor.TaskMonitor(session)
        if validator is None:
            validator = xapivalidate.Validator(session)
        self.monitor = monitor
        self.validator = validator

    @property
    def api(self):
        return getattr(self.session.xenapi, self.XAPI_CLASS)

    @property
    def async_api(self):
        return getattr(self.session.xenapi.Async, self.XAPI_CLASS)

    def _api_for(self, xapi_class):
        return getattr(self.session.xenapi, xapi_class)

    def uuid_of(self, xapi_class, ref):
        if ref == NULL_REF:
            return None
        return self._api_for(xapi_class).get_uuid(ref)

    def _default_sr(self):
        """OpaqueRef of the pool default SR; NULL_REF when none is set."""
        pool = self.session.xenapi.pool.get_all()[0]
        return self.session.xenapi.pool.get_default_SR(pool)

    def usable(self, uuid):
        """Resolve uuid when this driver may act on it. Subclasses with
        state-dependent rules override this."""
        return self.validator.exists(self.XAPI_CLASS, uuid)

    def _refs(self):
        return self.api.get_all()

    def _list_refs(self, refs):
        return taskresult.Success([self.api.get_uuid(ref) for ref in refs])

    @operation
    def list(self):
        return self._list_refs(self._refs())

    @operation
    def get_record(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        record = xapirecords.decode(self.XAPI_CLASS,
                                    self.api.get_record(ref),
                                    self.uuid_of)
        return taskresult.Success(record.to_dict())

    @operation
    def add_tag(self, uuid, tag):
        ref = self.usable(uuid)
        if ref is None or util.is_empty(tag):
            return taskresult.not_permitted()
        self.api.add_tags(ref, tag)
        return taskresult.Success()

    @operation
    def remove_tag(self, uuid, tag):
        ref = self.usable(uuid)
        if ref is None or util.is_empty(tag):
            return taskresult.not_permitted()
        self.api.remove_tags(ref, tag)
        return taskresult.Success()

    @operation
    def get_tags(self, uuid):
        ref = self.usable(uuid)
        if ref is None:
            return taskresult.not_permitted()
        return taskresult.Success(list(self.api.get_tags(ref)))

    def _search_by_tag(self, candidates, tag):
        if not candidates.ok:
            return candidates
        matched = []
        for uuid in candidates.payload:
            ref = self.api.get_by_uuid(uuid)
            if tag in self.api.get_tags(ref):
                matched.append(uuid)
        return taskresult.Success(matched)

    @operation
    def search_by_tag(self, tag):
        return self._search_by_tag(self.list(), tag)
