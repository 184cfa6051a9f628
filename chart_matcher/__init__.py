"""
chart-matcher: Match ranked chart entries to Spotify tracks.

Given a chart (an ordered list of rank, title and artist), this package
searches the Spotify catalog for each entry and picks the single most
likely track, even when metadata is inconsistent: featured artists,
remixes, covers and re-releases all show up in search results.

Architecture:
    chart/      - ChartEntry model and chart sources (files, in-memory lists)
    catalog/    - Candidate model, access credentials, Spotify search
    matching/   - Query builder, similarity, match selector, batch matcher
    core/       - Configuration, logging, exceptions, progress display
    cli.py      - Command-line interface

Matching Flow:
    1. Build a structured query: track:"<title>" artist:"<artist>"
    2. Search the catalog; if nothing is found, retry with "<title> <artist>"
    3. Score every candidate (popularity, title/artist similarity, album
       type, explicitness, recency, cover and remix penalties)
    4. Select the highest score; record the result for the entry

Usage:
    Command Line:
        chart-match --chart charts/2012.yaml --report 2012.json

    Python API:
        from chart_matcher.catalog import SpotifyCatalog
        from chart_matcher.chart import FileChartSource
        from chart_matcher.matching import match_chart

        catalog = SpotifyCatalog.from_client_credentials(client_id, client_secret)
        report = match_chart(catalog, FileChartSource(Path("charts/2012.yaml")))

        for result in report.results:
            print(result.entry, result.selected_uri)
"""

__version__ = "0.1.0"
