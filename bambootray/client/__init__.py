"""Build server clients.  Each client is a plan fetcher usable by the poller."""

from bambootray.client.bamboo import BambooClient, MultiServerFetcher, fetcher_from_settings

__all__ = ["BambooClient", "MultiServerFetcher", "fetcher_from_settings"]
