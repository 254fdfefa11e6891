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
# xapisession: login/logout against the management endpoint
#

import XenAPI

import util
import xc_errors

API_VERSION = "1.0"
ORIGINATOR = "xcpctl"

HOST_IS_SLAVE = "HOST_IS_SLAVE"


class Session(object):
    """An authenticated connection to one host.

    Attributes:
      host, port, use_ssl: where the session is bound
      xenapi: the XenAPI dispatcher (session.xenapi.VM.get_all() etc.)
    """

    def __init__(self, xapi_session, host, port, use_ssl):
        self._session = xapi_session
        self.host = host
        self.port = port
        self.use_ssl = use_ssl

    @property
    def xenapi(self):
        return self._session.xenapi

    @property
    def token(self):
        return self._session.handle

    def __repr__(self):
        return "Session(%s:%d)" % (self.host, self.port)


class SessionManager(object):

    def __init__(self, config):
        self.config = config

    def _connect(self, host):
        url = self.config.url_for(host)
        return XenAPI.Session(url, ignore_ssl=not self.config.verify_ssl)

    def _login_to(self, host):
        xapi_session = self._connect(host)
        xapi_session.xenapi.login_with_password(self.config.username,
                                                self.config.password,
                                                API_VERSION, ORIGINATOR)
        util.XClog("session: logged in to %s as %s" %
                   (host, self.config.username))
        return Session(xapi_session, host, self.config.port,
                       self.config.use_ssl)

    def login(self):
        """Log in to the configured host. If that host is a pool member
        rather than the master, log in once more against the master it
        names. Raises ClientError on failure."""
        host = self.config.host
        try:
            return self._login_to(host)
        except XenAPI.Failure as e:
            details = e.details or []
            if not details or details[0] != HOST_IS_SLAVE or len(details) < 2:
                util.XClog("session: login to %s failed: %s" % (host, e))
                raise xc_errors.XenError('SessionLoginFailed', opterr=details)
            master = details[1]

        util.XClog("session: %s is a pool member, redirecting to master %s" %
                   (host, master))
        try:
            return self._login_to(master)
        except XenAPI.Failure as e:
            details = e.details or []
            util.XClog("session: login to master %s failed: %s" % (master, e))
            if details and details[0] == HOST_IS_SLAVE:
                raise xc_errors.XenError('SessionRedirectLoop', opterr=master)
            raise xc_errors.XenError('SessionLoginFailed', opterr=details)

    def logout(self, session):
        try:
            session.xenapi.session.logout()
            util.XClog("session: logged out of %s" % session.host)
        except Exception as e:
            util.XClog("session: logout of %s failed (ignored): %s" %
                       (session.host, e))
