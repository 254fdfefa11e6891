import unittest

import testlib
import xc_errors
import taskresult
import taskmonitor
import Network
import VIF


def make(context, driver):
    session = context.session()
    return driver(session, taskmonitor.TaskMonitor(session, interval=0))


class TestNetwork(unittest.TestCase):

    @testlib.with_context
    def test_create(self, context):
        pool = context.pool

        result = make(context, Network.Network).create("backend")

        self.assertTrue(result.ok)
        record = pool.record("network", pool.ref_of("network",
                                                    result.payload))
        self.assertEqual("backend", record["name_label"])
        self.assertEqual("1500", record["MTU"])

    @testlib.with_context
    def test_create_needs_name(self, context):
        self.assertEqual(taskresult.not_permitted(),
                         make(context, Network.Network).create(""))
        self.assertEqual([], context.pool.called("network.create"))

    @testlib.with_context
    def test_destroy(self, context):
        pool = context.pool
        network = pool.add("network")

        result = make(context, Network.Network).destroy(pool.uuid(network))

        self.assertEqual(taskresult.Success(), result)
        self.assertFalse(network in pool.objects["network"])

    @testlib.with_context
    def test_destroy_unknown(self, context):
        self.assertEqual(taskresult.not_permitted(),
                         make(context, Network.Network).destroy("nope"))

    @testlib.with_context
    def test_get_record(self, context):
        pool = context.pool
        network = pool.add("network", name_label="backend")
        vif = pool.add("VIF", network=network)
        pool.record("network", network)["VIFs"].append(vif)

        result = make(context, Network.Network).get_record(
            pool.uuid(network))

        self.assertEqual([pool.uuid(vif)], result.payload["VIFs"])

    @testlib.with_context
    def test_list_and_tags(self, context):
        pool = context.pool
        first = pool.add("network")
        second = pool.add("network")
        driver = make(context, Network.Network)

        driver.add_tag(pool.uuid(second), "userid:7")

        self.assertEqual(2, len(driver.list().payload))
        self.assertEqual(taskresult.Success([pool.uuid(second)]),
                         driver.search_by_tag("userid:7"))
        self.assertEqual(taskresult.Success([]),
                         driver.get_tags(pool.uuid(first)))


class TestVIF(unittest.TestCase):

    @testlib.with_context
    def test_create(self, context):
        pool = context.pool
        vm = pool.add_vm()
        network = pool.add("network")

        result = make(context, VIF.VIF).create(pool.uuid(vm),
                                               pool.uuid(network), 1)

        self.assertTrue(result.ok)
        vif = pool.ref_of("VIF", result.payload)
        record = pool.record("VIF", vif)
        self.assertEqual("1", record["device"])
        self.assertEqual("", record["MAC"])
        self.assertEqual("1500", record["MTU"])
        self.assertEqual([vif], pool.record("VM", vm)["VIFs"])

    @testlib.with_context
    def test_create_on_unknown_network(self, context):
        pool = context.pool
        vm = pool.add_vm()

        result = make(context, VIF.VIF).create(pool.uuid(vm), "nope", 0)

        self.assertEqual(taskresult.not_permitted(), result)
        self.assertEqual([], pool.called("VIF.create"))

    @testlib.with_context
    def test_plug_unplug(self, context):
        pool = context.pool
        vif = pool.add("VIF")
        driver = make(context, VIF.VIF)

        self.assertEqual(taskresult.Success(), driver.plug(pool.uuid(vif)))
        self.assertTrue(pool.record("VIF", vif)["currently_attached"])
        self.assertEqual(taskresult.Success(), driver.unplug(pool.uuid(vif)))
        self.assertFalse(pool.record("VIF", vif)["currently_attached"])

    @testlib.with_context
    def test_plug_on_halted_vm(self, context):
        pool = context.pool
        vif = pool.add("VIF")
        pool.fail("VIF.plug", ["VM_BAD_POWER_STATE", "vm", "running",
                               "halted"])

        result = make(context, VIF.VIF).plug(pool.uuid(vif))

        self.assertEqual(xc_errors.BadPowerState, result.kind)

    @testlib.with_context
    def test_destroy(self, context):
        pool = context.pool
        vif = pool.add("VIF")

        self.assertEqual(taskresult.Success(),
                         make(context, VIF.VIF).destroy(pool.uuid(vif)))
        self.assertFalse(vif in pool.objects["VIF"])
