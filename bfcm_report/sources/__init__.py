"""
Source fetchers: the only layer that performs I/O.

base        : SourceFetcherSet ABC, SOURCE_NAMES, SourceFetchError.
fixture     : FixtureSourceFetcherSet (JSON snapshot, failure simulation).
http_client : HttpSourceFetcherSet (httpx, single-flight bearer token).
"""
