#!/usr/bin/env python3
""" Distance study: 1 AP + N STAs, STA cluster moved away from the AP scenario by scenario.
    Every STA uploads over TCP to the AP; throughput, avg. delay and packet loss are appended to a CSV.
    Usage: python3 wifiDistance.py [--csv <path>] [--verbose] [--from-file <yaml>] [--distances d ...] [--stations n] [--plot <png>]
"""
import sys
import argparse

from wifidist.config import Config
from wifidist.campaign import Campaign
from wifidist.engine import SimpyWifiEngine
from wifidist.errors import CampaignError
from wifidist.scenario import make_scenarios
from wifidist.sink import ResultSink


VERBOSE = False


def verboseprint(*args, **kwargs):
	if VERBOSE:
		print(*args, **kwargs)


def parse_params(conf, argv):
	parser = argparse.ArgumentParser(prog='wifiDistance')
	parser.add_argument('--csv', type=str, default=None, help='Output CSV filepath (default: results.csv)')
	parser.add_argument('--verbose', action='store_true', help='Print one line per scenario')
	parser.add_argument('--from-file', type=str, default=None, help='YAML file overriding config defaults')
	parser.add_argument('--distances', type=float, nargs='+', default=None, help='STA distances from the AP (m)')
	parser.add_argument('--stations', type=int, default=None, help='Number of STAs')
	parser.add_argument('--seed', type=int, default=None)
	parser.add_argument('--plot', type=str, default=None, help='Save a plot of the results table to this PNG')
	args = parser.parse_args(argv)

	if args.from_file:
		conf.load(args.from_file)
	if args.csv is not None:
		conf.CSV_PATH = args.csv
	if args.distances is not None:
		conf.DISTANCES = args.distances
	if args.stations is not None:
		conf.NR_STATIONS = args.stations
	if args.seed is not None:
		conf.SEED = args.seed
	return args


def main(argv=None):
	global VERBOSE
	conf = Config()
	try:
		args = parse_params(conf, argv)
		VERBOSE = args.verbose

		verboseprint("Distances (m):", conf.DISTANCES)
		verboseprint("Stations:", conf.NR_STATIONS)
		verboseprint("App time (s):", conf.APP_START, "-", conf.APP_STOP)
		verboseprint("Simulation time (s):", conf.SIM_STOP)
		verboseprint("Output:", conf.CSV_PATH)

		scenarios = make_scenarios(conf)
		engine = SimpyWifiEngine(conf, verboseprint)
		campaign = Campaign(conf, engine, ResultSink(conf.CSV_PATH), scenarios, verboseprint)
		campaign.run()

		if args.plot:
			from wifidist.plot import plot_results
			plot_results(conf.CSV_PATH, args.plot)
			verboseprint("Plot saved to", args.plot)
	except CampaignError as e:
		print(f"{type(e).__name__}: {e}", file=sys.stderr)
		return 1
	except OSError as e:
		print(f"Error: {e}", file=sys.stderr)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
