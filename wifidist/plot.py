import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from wifidist.sink import read_results

PANELS = [
	("throughput_mbps", "Throughput (Mbps)"),
	("avg_delay_ms", "Avg. delay (ms)"),
	("packet_loss_percent", "Packet loss (%)"),
]


def plot_results(csvPath, outPath):
	""" Plot every metric of a results table against distance and save the figure to outPath. """
	df = read_results(csvPath)
	fig, axes = plt.subplots(len(PANELS), 1, sharex=True, figsize=(7, 9))
	for ax, (column, label) in zip(axes, PANELS):
		ax.plot(df["distance_m"], df[column], marker="o", linestyle="")
		ax.set_ylabel(label)
		ax.grid(True, alpha=0.3)
	axes[-1].set_xlabel("Distance STA - AP (m)")
	fig.suptitle("WiFi performance vs. distance")
	fig.tight_layout()
	fig.savefig(outPath)
	plt.close(fig)
	return outPath
