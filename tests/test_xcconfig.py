import unittest

import mock

import xc_errors
import xcconfig


ENVIRON = {"XAPI_PATH": "xapi.example", "XAPI_PASS": "secret"}


@mock.patch('util.XClog')
class TestConfig(unittest.TestCase):

    def test_defaults(self, mock_log):
        config = xcconfig.Config.from_env(ENVIRON)

        self.assertEqual("xapi.example", config.host)
        self.assertEqual(443, config.port)
        self.assertTrue(config.use_ssl)
        self.assertFalse(config.verify_ssl)
        self.assertEqual("root", config.username)
        self.assertEqual(5, config.task_interval)
        self.assertEqual(None, config.task_timeout)
        self.assertEqual("https://xapi.example:443/", config.url)

    def test_overrides(self, mock_log):
        environ = dict(ENVIRON, XAPI_PORT="80", XAPI_SSL="false",
                       XAPI_USER="admin", XAPI_TASK_TIMEOUT="600",
                       XAPI_SSL_VERIFY="yes")
        config = xcconfig.Config.from_env(environ)

        self.assertEqual(80, config.port)
        self.assertFalse(config.use_ssl)
        self.assertTrue(config.verify_ssl)
        self.assertEqual("admin", config.username)
        self.assertEqual(600.0, config.task_timeout)
        self.assertEqual("http://master:80/", config.url_for("master"))

    def test_missing_password(self, mock_log):
        try:
            xcconfig.Config.from_env({"XAPI_PATH": "xapi.example"})
        except xc_errors.ClientError as e:
            raised_exception = e

        self.assertEqual(10, raised_exception.errno)
        self.assertTrue("XAPI_PASS" in str(raised_exception))

    def test_missing_host(self, mock_log):
        self.assertRaises(xc_errors.ClientError, xcconfig.Config.from_env,
                          {"XAPI_PASS": "secret"})

    def test_bad_port(self, mock_log):
        try:
            xcconfig.Config.from_env(dict(ENVIRON, XAPI_PORT="https"))
        except xc_errors.ClientError as e:
            raised_exception = e

        self.assertEqual(11, raised_exception.errno)

    def test_bad_ssl_flag(self, mock_log):
        self.assertRaises(xc_errors.ClientError, xcconfig.Config.from_env,
                          dict(ENVIRON, XAPI_SSL="maybe"))

    def test_repr_hides_password(self, mock_log):
        config = xcconfig.Config.from_env(ENVIRON)

        self.assertFalse("secret" in repr(config))
