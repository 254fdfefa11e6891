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
# xcconfig: management endpoint configuration
#

import os
import collections

import util
import xc_errors

DEFAULT_PORT = 443
DEFAULT_USERNAME = "root"
DEFAULT_TASK_INTERVAL = 5  # seconds

ENV_HOST = "XAPI_PATH"
ENV_PORT = "XAPI_PORT"
ENV_SSL = "XAPI_SSL"
ENV_SSL_VERIFY = "XAPI_SSL_VERIFY"
ENV_USER = "XAPI_USER"
ENV_PASS = "XAPI_PASS"
ENV_TASK_INTERVAL = "XAPI_TASK_INTERVAL"
ENV_TASK_TIMEOUT = "XAPI_TASK_TIMEOUT"

TRUE_VALUES = ["true", "yes", "on", "1"]
FALSE_VALUES = ["false", "no", "off", "0"]


def _bool(name, value, default):
    if util.is_empty(value):
        return default
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise xc_errors.XenError('ConfigInvalid', opterr="%s=%s" % (name, value))


def _number(name, value, default, cast=int):
    if util.is_empty(value):
        return default
    try:
        number = cast(value)
    except ValueError:
        raise xc_errors.XenError('ConfigInvalid',
                                 opterr="%s=%s" % (name, value))
    if number < 0:
        raise xc_errors.XenError('ConfigInvalid',
                                 opterr="%s=%s" % (name, value))
    return number


def _required(name, value):
    if util.is_empty(value):
        raise xc_errors.XenError('ConfigMissing', opterr=name)
    return value


class Config(collections.namedtuple("Config",
                                    ["host", "port", "use_ssl", "verify_ssl",
                                     "username", "password",
                                     "task_interval", "task_timeout"])):
    """One configured management endpoint per process.

    Certificate verification is off unless asked for: management
    endpoints ship with self-signed certificates.
    """

    __slots__ = ()

    def __new__(cls, host, password, port=DEFAULT_PORT, use_ssl=True,
                verify_ssl=False, username=DEFAULT_USERNAME,
                task_interval=DEFAULT_TASK_INTERVAL, task_timeout=None):
        _required(ENV_HOST, host)
        _required(ENV_USER, username)
        _required(ENV_PASS, password)
        return super(Config, cls).__new__(cls, host, port, use_ssl,
                                          verify_ssl, username, password,
                                          task_interval, task_timeout)

    @classmethod
    def from_env(cls, environ=None):
        if environ is None:
            environ = os.environ
        return cls(
            host=environ.get(ENV_HOST),
            password=environ.get(ENV_PASS),
            port=_number(ENV_PORT, environ.get(ENV_PORT), DEFAULT_PORT),
            use_ssl=_bool(ENV_SSL, environ.get(ENV_SSL), True),
            verify_ssl=_bool(ENV_SSL_VERIFY, environ.get(ENV_SSL_VERIFY),
                             False),
            username=environ.get(ENV_USER) or DEFAULT_USERNAME,
            task_interval=_number(ENV_TASK_INTERVAL,
                                  environ.get(ENV_TASK_INTERVAL),
                                  DEFAULT_TASK_INTERVAL, float),
            task_timeout=_number(ENV_TASK_TIMEOUT,
                                 environ.get(ENV_TASK_TIMEOUT), None, float))

    @property
    def url(self):
        return self.url_for(self.host)

    def url_for(self, host):
        scheme = "https" if self.use_ssl else "http"
        return "%s://%s:%d/" % (scheme, host, self.port)

    def __repr__(self):
        return "Config(host=%r, port=%r, use_ssl=%r, username=%r)" % \
            (self.host, self.port, self.use_ssl, self.username)
