"""
Basic example demonstrating simple usage of curlget
"""
from curlget import DownloadManager, DownloadError


def main():
    # Initialize the download manager
    manager = DownloadManager()

    # URL to download
    url = "https://raw.githubusercontent.com/torvalds/linux/master/README"

    try:
        result = manager.download(url)
        print(f"\nFinished: {result.phase.value}, {result.bytes_transferred} bytes")
    except DownloadError:
        # Already reported on stderr
        print("\nDownload failed")
    except KeyboardInterrupt:
        print("\nDownload cancelled")


if __name__ == "__main__":
    main()
