import json
import unittest

import xc_errors
import taskresult


class TestEnvelope(unittest.TestCase):

    def test_success_envelope(self):
        self.assertEqual({"Status": "Success",
                          "Description": "NO_DESCRIPTION",
                          "Value": ["a", "b"]},
                         taskresult.encode(taskresult.Success(["a", "b"])))

    def test_error_envelope(self):
        envelope = taskresult.encode(taskresult.not_permitted())

        self.assertEqual("Error", envelope["Status"])
        self.assertEqual("ACTION_NOT_PERMITTED", envelope["Description"])
        self.assertEqual(None, envelope["Value"])

    def test_unknown_error_envelope_carries_code(self):
        envelope = taskresult.encode(
            taskresult.failure(["HOST_OFFLINE", "OpaqueRef:h"]))

        self.assertEqual("HOST_OFFLINE", envelope["Description"])
        self.assertEqual(["HOST_OFFLINE", "OpaqueRef:h"], envelope["Value"])

    def test_round_trip_through_json(self):
        results = [taskresult.Success(),
                   taskresult.Success({"uuid": "u", "ref": "r"}),
                   taskresult.undefined("get.nothing"),
                   taskresult.Error(xc_errors.DiskFull, ["SR_FULL"]),
                   taskresult.Error(xc_errors.Unknown("TASK_TIMEOUT"),
                                    ["TASK_TIMEOUT", "OpaqueRef:t"])]
        for result in results:
            wire = json.dumps(taskresult.encode(result))
            self.assertEqual(result, taskresult.decode(json.loads(wire)))

    def test_composite_results(self):
        results = [taskresult.Success("uuid"), None]

        self.assertEqual(results,
                         taskresult.decode(taskresult.encode(results)))

    def test_malformed_envelope(self):
        self.assertRaises(taskresult.EnvelopeError, taskresult.decode,
                          {"Value": 1})
        self.assertRaises(taskresult.EnvelopeError, taskresult.decode,
                          {"Status": "Maybe"})
        self.assertRaises(taskresult.EnvelopeError, taskresult.decode,
                          {"Status": "Error", "Kind": "Oops"})

    def test_results_compare_by_value(self):
        self.assertNotEqual(taskresult.Success(1), taskresult.Success(2))
        self.assertNotEqual(taskresult.Success(), taskresult.not_permitted())
        self.assertEqual(taskresult.unsupported("x"),
                         taskresult.unsupported("x"))


class TestFailure(unittest.TestCase):

    def test_failure_keeps_details(self):
        details = ["VM_BAD_POWER_STATE", "OpaqueRef:1", "halted", "running"]
        result = taskresult.failure(details)

        self.assertEqual(taskresult.Error(xc_errors.BadPowerState, details),
                         result)

    def test_failure_without_details(self):
        result = taskresult.failure([])

        self.assertEqual(xc_errors.Unknown(None), result.kind)
        self.assertEqual([], result.detail)
