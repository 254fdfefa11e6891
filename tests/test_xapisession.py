import unittest

import testlib
import xc_errors
import xapisession


class TestSessionManager(unittest.TestCase):

    @testlib.with_context
    def test_login(self, context):
        manager = xapisession.SessionManager(testlib.config())

        session = manager.login()

        self.assertEqual("xapi.example", session.host)
        self.assertEqual("OpaqueRef:session-1", session.token)
        self.assertEqual([("https://xapi.example:443/", "root")],
                         context.pool.logins)
        self.assertTrue(context.sessions[0].ignore_ssl)

    @testlib.with_context
    def test_login_verifies_certificates_when_asked(self, context):
        manager = xapisession.SessionManager(
            testlib.config(verify_ssl=True, use_ssl=True))

        manager.login()

        self.assertFalse(context.sessions[0].ignore_ssl)

    @testlib.with_context
    def test_login_redirects_to_master_once(self, context):
        context.pool.login_failures["xapi.example"] = [
            xapisession.HOST_IS_SLAVE, "master.example"]
        manager = xapisession.SessionManager(testlib.config())

        session = manager.login()

        self.assertEqual("master.example", session.host)
        self.assertEqual(["https://xapi.example:443/",
                          "https://master.example:443/"],
                         [url for url, _ in context.pool.logins])
        self.assertTrue(context.logged("redirecting to master"))

    @testlib.with_context
    def test_redirect_loop_is_fatal(self, context):
        context.pool.login_failures["xapi.example"] = [
            xapisession.HOST_IS_SLAVE, "master.example"]
        context.pool.login_failures["master.example"] = [
            xapisession.HOST_IS_SLAVE, "xapi.example"]
        manager = xapisession.SessionManager(testlib.config())

        try:
            manager.login()
        except xc_errors.ClientError as e:
            raised_exception = e

        self.assertEqual(21, raised_exception.errno)
        self.assertEqual(2, len(context.pool.logins))

    @testlib.with_context
    def test_bad_credentials(self, context):
        context.pool.login_failures["xapi.example"] = [
            "SESSION_AUTHENTICATION_FAILED", "root", "bad password"]
        manager = xapisession.SessionManager(testlib.config())

        try:
            manager.login()
        except xc_errors.ClientError as e:
            raised_exception = e

        self.assertEqual(20, raised_exception.errno)
        self.assertFalse([line for line in context.log_lines
                          if "secret" in line])

    @testlib.with_context
    def test_logout(self, context):
        manager = xapisession.SessionManager(testlib.config())
        session = manager.login()

        manager.logout(session)

        self.assertEqual(1, context.pool.logouts)

    @testlib.with_context
    def test_logout_failure_is_ignored(self, context):
        context.pool.fail("session.logout", ["SESSION_INVALID"])
        manager = xapisession.SessionManager(testlib.config())
        session = manager.login()

        manager.logout(session)

        self.assertTrue(context.logged("failed (ignored)"))
