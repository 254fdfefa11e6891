import unittest
import xmlrpc.client

import mock
import XenAPI

import xc_errors
import taskresult
import XenObject


class Thing(XenObject.XenObject):
    XAPI_CLASS = "thing"

    def __init__(self, error):
        self.error = error

    @XenObject.operation
    def poke(self):
        """Poke it."""
        raise self.error


@mock.patch('util.logException')
class TestOperation(unittest.TestCase):

    def test_remote_failure_is_translated(self, mock_log):
        result = Thing(XenAPI.Failure(["SR_FULL", "sr"])).poke()

        self.assertEqual(taskresult.Error(xc_errors.DiskFull,
                                          ["SR_FULL", "sr"]), result)
        mock_log.assert_called_once_with("thing.poke")

    def test_connection_refused(self, mock_log):
        result = Thing(ConnectionRefusedError(111, "refused")).poke()

        self.assertEqual(xc_errors.Unknown(xc_errors.CONNECTION_FAILED),
                         result.kind)

    def test_protocol_error(self, mock_log):
        error = xmlrpc.client.ProtocolError("xapi/", 502, "Bad Gateway", {})

        result = Thing(error).poke()

        self.assertEqual(xc_errors.Unknown(xc_errors.CONNECTION_FAILED),
                         result.kind)

    def test_other_exceptions_propagate(self, mock_log):
        self.assertRaises(ZeroDivisionError,
                          Thing(ZeroDivisionError()).poke)

    def test_wrapper_keeps_name(self, mock_log):
        self.assertEqual("poke", Thing.poke.__name__)
        self.assertEqual("Poke it.", Thing.poke.__doc__)
