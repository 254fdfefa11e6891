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
# xapirecords: typed views of the records returned by <class>.get_record
#

import json
import datetime
import xmlrpc.client

NULL_REF = "OpaqueRef:NULL"

# field kinds
STR = "str"
BOOL = "bool"
MAP = "map"
LIST = "list"
TIME = "time"
JSON = "json"

XAPI_TIME_FORMATS = ["%Y%m%dT%H:%M:%SZ", "%Y%m%dT%H:%M:%S",
                     "%Y-%m-%dT%H:%M:%SZ"]


class RecordError(Exception):
    """The remote record does not have the expected shape"""
    pass


def Ref(xapi_class):
    return ("ref", xapi_class)


def Refs(xapi_class):
    return ("refs", xapi_class)


def _time(value):
    if isinstance(value, xmlrpc.client.DateTime):
        value = value.value
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if not isinstance(value, str):
        raise TypeError("not a time value")
    for fmt in XAPI_TIME_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt).isoformat()
        except ValueError:
            pass
    return value


def _json(value):
    if not isinstance(value, str):
        raise TypeError("not a string")
    try:
        return json.loads(value)
    except ValueError:
        # older guest tools write an s-expression here
        return None


class Record(object):
    """A decoded <class>.get_record struct.

    FIELDS maps each kept field to its kind. References to other objects
    are rewritten to UUIDs through uuid_of(xapi_class, ref), so a record
    never hands an OpaqueRef back to the caller.
    """

    XAPI_CLASS = None
    FIELDS = {}

    def __init__(self, fields):
        self._fields = fields

    def __getattr__(self, name):
        try:
            return self.__dict__['_fields'][name]
        except KeyError:
            raise AttributeError(name)

    def __eq__(self, other):
        return type(self) == type(other) and self._fields == other._fields

    def to_dict(self):
        return dict(self._fields)

    @classmethod
    def _convert(cls, name, kind, value, uuid_of):
        if kind == STR:
            if not isinstance(value, str):
                raise TypeError("expected a string")
            return value
        if kind == BOOL:
            if not isinstance(value, bool):
                raise TypeError("expected a bool")
            return value
        if kind == MAP:
            if not isinstance(value, dict):
                raise TypeError("expected a map")
            return dict(value)
        if kind == LIST:
            if not isinstance(value, (list, tuple)):
                raise TypeError("expected a list")
            return list(value)
        if kind == TIME:
            return _time(value)
        if kind == JSON:
            return _json(value)
        ref_kind, xapi_class = kind
        if ref_kind == "ref":
            if not isinstance(value, str):
                raise TypeError("expected a reference")
            if value == NULL_REF or uuid_of is None:
                return None if value == NULL_REF else value
            return uuid_of(xapi_class, value)
        if not isinstance(value, (list, tuple)):
            raise TypeError("expected a list of references")
        if uuid_of is None:
            return list(value)
        return [uuid_of(xapi_class, ref) for ref in value
                if ref != NULL_REF]

    @classmethod
    def from_xapi(cls, raw, uuid_of=None):
        if not isinstance(raw, dict):
            raise RecordError("%s record is not a struct: %r" %
                              (cls.XAPI_CLASS, type(raw)))
        fields = {}
        for name, kind in cls.FIELDS.items():
            if name not in raw:
                raise RecordError("%s record has no field %s" %
                                  (cls.XAPI_CLASS, name))
            try:
                fields[name] = cls._convert(name, kind, raw[name], uuid_of)
            except TypeError as e:
                raise RecordError("%s record field %s: %s" %
                                  (cls.XAPI_CLASS, name, e))
        return cls(fields)


class VMRecord(Record):
    XAPI_CLASS = "VM"
    FIELDS = {
        "uuid"               : STR,
        "name_label"         : STR,
        "name_description"   : STR,
        "power_state"        : STR,
        "is_a_template"      : BOOL,
        "is_control_domain"  : BOOL,
        "memory_static_max"  : STR,
        "VCPUs_max"          : STR,
        "PV_bootloader"      : STR,
        "PV_args"            : STR,
        "other_config"       : MAP,
        "tags"               : LIST,
        "VBDs"               : Refs("VBD"),
        "VIFs"               : Refs("VIF"),
        "snapshot_time"      : TIME,
        "last_booted_record" : JSON,
    }


class VDIRecord(Record):
    XAPI_CLASS = "VDI"
    FIELDS = {
        "uuid"                 : STR,
        "name_label"           : STR,
        "name_description"     : STR,
        "SR"                   : Ref("SR"),
        "virtual_size"         : STR,
        "physical_utilisation" : STR,
        "type"                 : STR,
        "read_only"            : BOOL,
        "is_a_snapshot"        : BOOL,
        "snapshot_time"        : TIME,
        "VBDs"                 : Refs("VBD"),
        "tags"                 : LIST,
        "other_config"         : MAP,
    }


class VBDRecord(Record):
    XAPI_CLASS = "VBD"
    FIELDS = {
        "uuid"               : STR,
        "VM"                 : Ref("VM"),
        "VDI"                : Ref("VDI"),
        "device"             : STR,
        "userdevice"         : STR,
        "type"               : STR,
        "mode"               : STR,
        "bootable"           : BOOL,
        "currently_attached" : BOOL,
        "empty"              : BOOL,
    }


class VIFRecord(Record):
    XAPI_CLASS = "VIF"
    FIELDS = {
        "uuid"               : STR,
        "VM"                 : Ref("VM"),
        "network"            : Ref("network"),
        "device"             : STR,
        "MAC"                : STR,
        "MTU"                : STR,
        "currently_attached" : BOOL,
    }


class NetworkRecord(Record):
    XAPI_CLASS = "network"
    FIELDS = {
        "uuid"             : STR,
        "name_label"       : STR,
        "name_description" : STR,
        "bridge"           : STR,
        "MTU"              : STR,
        "VIFs"             : Refs("VIF"),
        "tags"             : LIST,
        "other_config"     : MAP,
    }


class SRRecord(Record):
    XAPI_CLASS = "SR"
    FIELDS = {
        "uuid"                 : STR,
        "name_label"           : STR,
        "name_description"     : STR,
        "type"                 : STR,
        "content_type"         : STR,
        "shared"               : BOOL,
        "physical_size"        : STR,
        "physical_utilisation" : STR,
        "VDIs"                 : Refs("VDI"),
        "tags"                 : LIST,
        "other_config"         : MAP,
    }


class MetricsRecord(Record):
    """VM_metrics: physical figures of a running VM"""
    XAPI_CLASS = "VM_metrics"
    FIELDS = {
        "memory_actual" : STR,
        "VCPUs_number"  : STR,
        "start_time"    : TIME,
        "install_time"  : TIME,
        "last_updated"  : TIME,
    }


class GuestMetricsRecord(Record):
    """VM_guest_metrics: what the guest tools report"""
    XAPI_CLASS = "VM_guest_metrics"
    FIELDS = {
        "os_version"   : MAP,
        "networks"     : MAP,
        "disks"        : MAP,
        "last_updated" : TIME,
    }


RECORDS = dict((r.XAPI_CLASS, r) for r in
               [VMRecord, VDIRecord, VBDRecord, VIFRecord, NetworkRecord,
                SRRecord, MetricsRecord, GuestMetricsRecord])


def decode(xapi_class, raw, uuid_of=None):
    try:
        record_class = RECORDS[xapi_class]
    except KeyError:
        raise RecordError("no record type for %s" % xapi_class)
    return record_class.from_xapi(raw, uuid_of)
