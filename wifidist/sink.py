from __future__ import annotations

import os

import pandas as pd

from wifidist.errors import PersistenceError

COLUMNS = ["distance_m", "throughput_mbps", "avg_delay_ms", "packet_loss_percent"]
HEADER = ",".join(COLUMNS) + "\n"


class ResultSink:
	""" Append-only CSV table of scenario results. """
	def __init__(self, path):
		self.path = path

	def initialize(self):
		"""
		Write the header if the table does not exist yet (or is empty).
		An existing table must start with exactly our header and end with a
		complete row, otherwise appending to it would corrupt it.
		"""
		try:
			if os.path.exists(self.path) and os.path.getsize(self.path) > 0:
				with open(self.path, 'r', encoding='utf-8', newline='') as f:
					first = f.readline()
				with open(self.path, 'rb') as f:
					f.seek(-1, os.SEEK_END)
					last = f.read(1).decode('ascii', errors='replace')
				if first != HEADER:
					raise PersistenceError(f"{self.path} has an unexpected header: {first.strip()!r}")
				if last != "\n":
					raise PersistenceError(f"{self.path} ends with an incomplete row")
				return
			directory = os.path.dirname(self.path)
			if directory:
				os.makedirs(directory, exist_ok=True)
			with open(self.path, 'w', encoding='utf-8', newline='') as f:
				f.write(HEADER)
		except OSError as e:
			raise PersistenceError(f"Cannot initialize {self.path}: {e}") from e
		except UnicodeDecodeError as e:
			raise PersistenceError(f"{self.path} is not a UTF-8 table: {e}") from e

	@staticmethod
	def format_row(result):
		df = pd.DataFrame([[float(v) for v in result.as_row()]], columns=COLUMNS)
		return df.to_csv(header=False, index=False, float_format="%.2f", lineterminator="\n")

	def append(self, result):
		# the row is fully composed before the file is touched
		row = self.format_row(result)
		try:
			with open(self.path, 'a', encoding='utf-8', newline='') as f:
				f.write(row)
		except OSError as e:
			raise PersistenceError(f"Cannot append to {self.path}: {e}", result.distance) from e


def read_results(path):
	try:
		return pd.read_csv(path)
	except (OSError, pd.errors.ParserError) as e:
		raise PersistenceError(f"Cannot read results from {path}: {e}") from e
