import syslog
import unittest

import mock

import util


class TestLogging(unittest.TestCase):

    @mock.patch('util._logToSyslog')
    def test_multiline_message_logged_per_line(self, mock_syslog):
        util.XClog("one\ntwo")

        self.assertEqual(2, mock_syslog.call_count)
        self.assertEqual(
            mock.call("xcpctl", syslog.LOG_LOCAL2, syslog.LOG_INFO, "two"),
            mock_syslog.call_args)

    @mock.patch('util.XClog')
    def test_log_exception(self, mock_log):
        try:
            raise KeyError("task")
        except KeyError:
            util.logException("do.vm.clone")

        message = mock_log.call_args[0][0]
        self.assertTrue(message.startswith(
            "***** do.vm.clone: EXCEPTION <class 'KeyError'>, 'task'"))
        self.assertEqual(syslog.LOG_ERR, mock_log.call_args[1]["priority"])


class TestHelpers(unittest.TestCase):

    def test_hide_secrets(self):
        params = {"vm": "abc", "password": "pw",
                  "nested": {"XAPI_PASS": "pw"}}

        self.assertEqual({"vm": "abc", "password": "******",
                          "nested": {"XAPI_PASS": "******"}},
                         util.hide_secrets(params))
        self.assertEqual("pw", params["password"])

    def test_hide_secrets_passes_non_dicts(self):
        self.assertEqual("uuid", util.hide_secrets("uuid"))

    def test_to_bytes(self):
        self.assertEqual(8 * 1024 ** 3, util.to_bytes("8", "G"))
        self.assertEqual(512 * 1024 ** 2, util.to_bytes(512, "m"))
        self.assertEqual(4096, util.to_bytes("4096", None))

    def test_to_bytes_bad_unit(self):
        self.assertRaises(ValueError, util.to_bytes, 1, "T")

    def test_is_empty(self):
        self.assertTrue(util.is_empty(None))
        self.assertTrue(util.is_empty(""))
        self.assertFalse(util.is_empty("x"))
        self.assertFalse(util.is_empty(0))


class TestRetryLoop(unittest.TestCase):

    @mock.patch('util.XClog')
    @mock.patch('time.sleep')
    def test_retries_transient_failures(self, mock_sleep, mock_log):
        attempts = []

        @util.retried(backoff=5, limit=3)
        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise util.RetryLoop.TransientFailure(OSError("refused"))
            return "ok"

        self.assertEqual("ok", flaky())
        self.assertEqual(3, len(attempts))
        self.assertEqual([mock.call(5), mock.call(5)],
                         mock_sleep.call_args_list)

    @mock.patch('util.XClog')
    @mock.patch('time.sleep')
    def test_gives_up_after_limit(self, mock_sleep, mock_log):
        @util.retried(backoff=1, limit=2)
        def broken():
            raise util.RetryLoop.TransientFailure(OSError("refused"))

        self.assertRaises(OSError, broken)
        self.assertEqual(1, mock_sleep.call_count)
