"""
Example driving the curlget transfer loop with a tqdm progress bar
"""
import os
from contextlib import closing

from tqdm import tqdm

from curlget import TransferLoop, TransferPhase, open_remote
from curlget.clock import TransferClock
from curlget.signals import CancellationBridge, CancellationToken


class TqdmRenderer:
    """Stands in for ProgressLineRenderer: the loop only needs render() and finish()"""

    def __init__(self, desc: str):
        self.desc = desc
        self.bar = None

    def render(self, state, size_str, rate_str, total_str=None, eta_str=None) -> int:
        if self.bar is None:
            self.bar = tqdm(
                total=state.total_bytes or None,
                desc=self.desc,
                unit='B',
                unit_scale=True,
                unit_divisor=1024,
            )
        self.bar.update(state.bytes_transferred - self.bar.n)
        self.bar.set_postfix_str(rate_str)
        return 0

    def finish(self) -> None:
        if self.bar is not None:
            self.bar.close()


def download_with_progress(url: str, output_path: str) -> bool:
    """
    Download a file with a progress bar

    Args:
        url (str): URL to download from
        output_path (str): Where to save the file

    Returns:
        bool: True if download was successful, False otherwise
    """
    token = CancellationToken()
    with CancellationBridge(token):
        with closing(open_remote(url, cancel_token=token)) as remote:
            with open(output_path, "wb") as sink:
                loop = TransferLoop(
                    TqdmRenderer(os.path.basename(output_path)),
                    clock=TransferClock(interval_ms=100),
                    cancel_token=token,
                )
                result = loop.run(remote, sink, remote.total_bytes)

    if result.phase is TransferPhase.FAILED:
        print(f"Error downloading {os.path.basename(output_path)}: {result.error}")
    return result.succeeded


def main():
    # Create downloads directory
    os.makedirs("downloads", exist_ok=True)

    # Files to download
    downloads = [
        {
            "url": "https://raw.githubusercontent.com/torvalds/linux/master/COPYING",
            "output": "downloads/license.txt"
        },
        {
            "url": "https://raw.githubusercontent.com/torvalds/linux/master/CREDITS",
            "output": "downloads/credits.txt"
        }
    ]

    print("Starting downloads...\n")

    successful = 0
    for download in downloads:
        if download_with_progress(download["url"], download["output"]):
            successful += 1

    print(f"\nCompleted {successful} of {len(downloads)} downloads")


if __name__ == "__main__":
    main()
