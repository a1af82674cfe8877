# gleaner

Building blocks for writing web scrapers in Python.

## What is inside

- `gleaner.selection.Selection` — an ordered, duplicate-free set of parsed HTML
  nodes queried with CSS selectors (`from_html`, `find`, `first`, `text`,
  `attr`; iterating yields one single-node `Selection` per node).
- `gleaner.xmlelement.XMLElement` — one matched HTML or XML node (lxml) with
  XPath helpers: `attr`, `child_text`, `child_texts`, `child_attr`,
  `child_attrs`. A query starting with `/` is taken relative to the element.
- `gleaner.request.Request` — a request with headers, context and depth;
  `absolute_url` resolves links against the page (fragments give `""`),
  `marshal` / `Request.unmarshal` serialise it as JSON, `abort` marks it
  cancelled.
- `gleaner.response.Response` — status, body and headers; `save` writes the
  body to disk, `file_name` derives a safe file name from
  `Content-Disposition` or the URL, `fix_charset` converts the body to UTF-8.
  `sanitize_file_name` is available on its own.
- `gleaner.http_backend` — `HTTPBackend` built on `requests`, with per-domain
  `LimitRule`s (regexp or glob pattern, parallelism, delay and random delay in
  seconds), a body size cap, gzip handling and an on-disk response cache
  (`cache`). Responses with status 500 or above are never cached.
- `gleaner.queue` — `Queue` consuming stored requests with several worker
  threads, backed by `InMemoryQueueStorage` (default limit 100000 entries) or
  any `QueueStorage` implementation.
- `gleaner.storage` — the `Storage` interface and `InMemoryStorage` for
  visited request ids and cookies, plus `stringify_cookies`,
  `unstringify_cookies` and `contains_cookie`.
- `gleaner.proxy.round_robin_proxy_switcher` — rotate through proxy URLs.
- `gleaner.extensions` — `random_user_agent`, `random_mobile_user_agent`,
  `referer` and `url_length_filter`.
- `gleaner.errors` — `GleanerError` and its subclasses `NoPatternError`,
  `AbortedAfterHeadersError`, `EmptyProxyURLError` and `QueueFullError`.

## Installation

```
pip install .
```

## Examples

### CSS selection

```python
from gleaner.selection import Selection

doc = Selection.from_html('<ul><li class="x">one</li><li>two</li></ul>')
print(doc.find("li").first().attr("class"))     # x
print([item.text() for item in doc.find("li")])  # ['one', 'two']
```

### XPath helpers

```python
from lxml import html

from gleaner.response import Response
from gleaner.xmlelement import XMLElement

doc = html.fromstring("<html><body><p> Hello </p></body></html>")
element = XMLElement.from_html_node(Response(status_code=200, body=b""), doc)
print(element.child_text("//p"))  # Hello
```

### Requests and limits

```python
from gleaner.http_backend import HTTPBackend, LimitRule
from gleaner.request import Request

backend = HTTPBackend()
backend.limit(LimitRule(domain_glob="*.example.com", parallelism=2, delay=0.5))

request = Request(url="https://www.example.com/")
response = backend.do(request, 0, lambda req, status, headers: True)
response.fix_charset(detect_charset=True)
```

`LimitRule.init` (called by `limit`) raises `NoPatternError` when neither
`domain_regexp` nor `domain_glob` is set. If the header check returns false,
`do` raises `AbortedAfterHeadersError`.

### Queue

`Queue.run(collector)` needs an object with an `unmarshal_request(data)`
method that returns something with a `do()` method; each worker thread calls
`do()` on the requests it receives. `run` returns once the storage is empty
and no request is in flight, or after `stop()`.

### Extensions

The functions in `gleaner.extensions` take any object offering
`on_request(callback)` and `on_response(callback)` and register their
callbacks on it.

## What the package does not do

There is no crawler object here that drives a crawl: nothing registers HTML
or XML callbacks, follows links, tracks visited pages or calls the extensions'
hooks by itself. `Queue` and the extensions work with a collector object that
you provide. There is no command-line program. CSS queries go through
`Selection`; there is no per-element CSS helper class and no declarative
extraction of pages into objects.

## Running the tests

```
pip install .[test]
pytest
```