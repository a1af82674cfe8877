"""Web scraping building blocks: CSS selection, XPath elements, requests and responses, rate-limited HTTP backend, queue, storage, proxies and extensions."""

__version__ = "0.1.0"