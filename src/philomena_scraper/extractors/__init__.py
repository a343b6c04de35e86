"""Platform extractors and the classification pipeline that selects them.

Sub-modules:
- ``base``        — ``Extractor`` ABC, ``Step`` pipelines and ``ScrapeContext``
- ``registry``    — the closed, priority-ordered set of extractors
- ``classifier``  — URL normalization and extractor selection
- ``dispatcher``  — runs one extractor under the scrape deadline
- ``<platform>``  — one package per supported platform
"""
