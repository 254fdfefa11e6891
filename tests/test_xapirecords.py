import unittest
import xmlrpc.client

import testlib
import xapirecords


def vm_record(**fields):
    record = testlib._defaults("VM")
    record["uuid"] = "vm-uuid"
    record.update(fields)
    return record


class TestRecords(unittest.TestCase):

    def test_decode_vm(self):
        record = xapirecords.decode("VM", vm_record(name_label="web"))

        self.assertEqual("web", record.name_label)
        self.assertEqual("1970-01-01T00:00:00", record.snapshot_time)
        self.assertEqual(None, record.last_booted_record)

    def test_references_become_uuids(self):
        uuids = {"OpaqueRef:vbd1": "vbd-uuid"}
        raw = vm_record(VBDs=["OpaqueRef:vbd1", "OpaqueRef:NULL"])

        record = xapirecords.decode(
            "VM", raw, lambda xapi_class, ref: uuids[ref])

        self.assertEqual(["vbd-uuid"], record.VBDs)

    def test_null_reference_is_none(self):
        raw = testlib._defaults("VIF")
        raw["uuid"] = "vif-uuid"

        record = xapirecords.decode("VIF", raw, lambda c, r: "never")

        self.assertEqual(None, record.VM)
        self.assertEqual(None, record.network)

    def test_last_booted_record_json(self):
        record = xapirecords.decode(
            "VM", vm_record(last_booted_record='{"power_state": "Halted"}'))

        self.assertEqual({"power_state": "Halted"}, record.last_booted_record)

    def test_time_from_datetime(self):
        raw = testlib._defaults("VM_metrics")
        raw["start_time"] = xmlrpc.client.DateTime("20150301T10:11:12Z")

        record = xapirecords.decode("VM_metrics", raw)

        self.assertEqual("2015-03-01T10:11:12", record.start_time)

    def test_missing_field(self):
        raw = vm_record()
        del raw["power_state"]

        self.assertRaises(xapirecords.RecordError, xapirecords.decode,
                          "VM", raw)

    def test_wrong_type(self):
        self.assertRaises(xapirecords.RecordError, xapirecords.decode,
                          "VM", vm_record(is_a_template="false"))

    def test_not_a_struct(self):
        self.assertRaises(xapirecords.RecordError, xapirecords.decode,
                          "VM", "OpaqueRef:vm")

    def test_unknown_class(self):
        self.assertRaises(xapirecords.RecordError, xapirecords.decode,
                          "host", {})

    def test_to_dict_is_a_copy(self):
        record = xapirecords.decode("VM", vm_record())
        fields = record.to_dict()
        fields["uuid"] = "other"

        self.assertEqual("vm-uuid", record.uuid)
