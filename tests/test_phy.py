import unittest

import wifidist.phy
from wifidist.config import Config

class TestPhy(unittest.TestCase):

    def setUp(self):
        self.conf = Config()

    def test_path_loss_grows_with_distance(self):
        conf = self.conf
        self.assertAlmostEqual(wifidist.phy.estimate_path_loss(conf, 1.0), conf.LPLD0, msg="reference loss at 1 m")
        # exponent 3: every decade of distance adds 30 dB
        diff = wifidist.phy.estimate_path_loss(conf, 100.0) - wifidist.phy.estimate_path_loss(conf, 10.0)
        self.assertAlmostEqual(diff, 30.0)

    def test_path_loss_colocated(self):
        # nodes on top of each other must not blow up log10
        loss = wifidist.phy.estimate_path_loss(self.conf, 0.0)
        self.assertEqual(loss, wifidist.phy.estimate_path_loss(self.conf, 0.001))

    def test_rate_selection(self):
        conf = self.conf
        near, _ = wifidist.phy.select_rate(conf, wifidist.phy.link_snr(conf, 5.0), 1488)
        far, _ = wifidist.phy.select_rate(conf, wifidist.phy.link_snr(conf, 50.0), 1488)
        self.assertEqual(near, 54.0, "close STA uses the top rate")
        self.assertLess(far, near, "far STA falls back to a slower rate")
        self.assertEqual(wifidist.phy.select_rate(conf, -100.0, 1488)[0], 6.0, "base rate below all thresholds")

    def test_packet_error_rate(self):
        # 50% point sits PER_MARGIN below the threshold
        self.assertAlmostEqual(wifidist.phy.packet_error_rate(10.0 - wifidist.phy.PER_MARGIN, 10.0), 0.5)
        for _, threshold in wifidist.phy.OFDM_RATES:
            self.assertLess(wifidist.phy.packet_error_rate(threshold, threshold), 0.02, "a link at its rate's threshold barely loses frames")
        self.assertLess(wifidist.phy.packet_error_rate(20.0, 10.0), 0.01)
        self.assertGreater(wifidist.phy.packet_error_rate(-5.0, 10.0), 0.99)
        # extreme values must not overflow
        self.assertEqual(wifidist.phy.packet_error_rate(-1e6, 0.0), 1.0)
        self.assertEqual(wifidist.phy.packet_error_rate(1e6, 0.0), 0.0)

    def test_rate_choice_never_favours_a_longer_link(self):
        # expected goodput of the chosen rate can only drop as the link gets longer
        conf = self.conf
        previous = None
        for step in range(2, 201):
            snr = wifidist.phy.link_snr(conf, step / 2)
            rate, threshold = wifidist.phy.select_rate(conf, snr, 1488)
            goodput = wifidist.phy.expected_success(conf, snr, threshold) / wifidist.phy.airtime(conf, 1488, rate)
            if previous is not None:
                self.assertLessEqual(goodput, previous + 1e-9, f"goodput rises at {step / 2} m")
            previous = goodput

    def test_expected_success(self):
        conf = self.conf
        self.assertAlmostEqual(wifidist.phy.expected_success(conf, 100.0, 10.0), 1.0)
        self.assertAlmostEqual(wifidist.phy.expected_success(conf, -100.0, 10.0), 0.0)
        conf.FADING_STD = 0.0
        self.assertAlmostEqual(wifidist.phy.expected_success(conf, 10.0, 10.0), 1.0 - wifidist.phy.packet_error_rate(10.0, 10.0))

    def test_airtime(self):
        conf = self.conf
        t54 = wifidist.phy.airtime(conf, 1488, 54.0)
        t6 = wifidist.phy.airtime(conf, 1488, 6.0)
        self.assertGreater(t6, t54)
        self.assertAlmostEqual(t54, conf.PHY_OVERHEAD + (1488 + conf.MAC_HEADER) * 8 / 54e6)


if __name__ == '__main__':
    unittest.main()
