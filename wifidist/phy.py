import math

import numpy as np
from numpy.polynomial.hermite_e import hermegauss

# 802.11a OFDM rates (Mbps) and the minimum SNR (dB) each one needs for a
# low packet error rate, fastest first
OFDM_RATES = [
    (54.0, 24.56),
    (48.0, 24.05),
    (36.0, 18.80),
    (24.0, 17.04),
    (18.0, 10.79),
    (12.0, 9.22),
    (9.0, 6.02),
    (6.0, 5.01),
]
BOLTZMANN_DBM = -174.0  # thermal noise density, dBm/Hz
PER_SLOPE = 1.5  # steepness of the packet error curve around a rate's threshold (1/dB)
PER_MARGIN = 3.0  # dB between the 50% error point and a rate's threshold
FADING_POINTS = 9  # Gauss-Hermite nodes for averaging over fading


def estimate_path_loss(conf, dist):
    # co-located nodes are problematic for log(dist)
    dist = max(dist, .001)
    return conf.LPLD0 + 10 * conf.GAMMA * math.log10(dist / conf.D0)


def noise_floor(conf):
    return BOLTZMANN_DBM + 10 * math.log10(conf.BANDWIDTH) + conf.NOISE_FIGURE


def link_snr(conf, dist):
    rssi = conf.PTX + 2 * conf.GL - estimate_path_loss(conf, dist)
    return rssi - noise_floor(conf)


def select_rate(conf, snr, ipBytes):
    """
    Ideal rate control: the rate with the best expected goodput on this link,
    taking the packet error rate under fading into account. The base rate
    is used when no rate gets anything through.
    """
    best = OFDM_RATES[-1]
    bestGoodput = 0.0
    for rate, threshold in reversed(OFDM_RATES):
        goodput = expected_success(conf, snr, threshold) / airtime(conf, ipBytes, rate)
        if goodput > bestGoodput:
            best, bestGoodput = (rate, threshold), goodput
    return best


def packet_error_rate(snr, threshold):
    # the curve is centred PER_MARGIN dB below the threshold, so a link right
    # at a rate's threshold already loses only about 1% of its frames
    x = PER_SLOPE * (snr - threshold + PER_MARGIN)
    # logistic curve, evaluated without overflow on either side
    if x >= 0:
        return math.exp(-x) / (1.0 + math.exp(-x))
    return 1.0 / (1.0 + math.exp(x))


def expected_success(conf, snr, threshold):
    """ probability that one attempt gets through, averaged over log-normal fading """
    nodes, weights = hermegauss(FADING_POINTS)
    per = np.array([packet_error_rate(snr + conf.FADING_STD * x, threshold) for x in nodes])
    return 1.0 - float(np.dot(weights, per) / weights.sum())


def airtime(conf, payload_bytes, rate_mbps):
    """ seconds on air for one MAC data frame carrying an IP packet of payload_bytes """
    bits = (payload_bytes + conf.MAC_HEADER) * 8
    return conf.PHY_OVERHEAD + bits / (rate_mbps * 1e6)
