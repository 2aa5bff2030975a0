"""Shared fixtures for core unit tests"""

import pytest

from helpparse.core.detect import create_format_detector
from helpparse.core.parsers.csv_parser import CsvParser
from helpparse.core.parsers.json_parser import JsonParser
from helpparse.core.parsers.markdown_parser import MarkdownParser
from helpparse.core.parsers.mdx_parser import MdxParser


SAMPLE_MD = """\
---
title: Getting Started
category: basics
tags: [setup, install]
order: 2
---

# Getting Started

A paragraph with **bold** text and a [guide](https://example.com/guide).

## Install

- item one
- item two

```python
print("hello")
```

## Configure

![Diagram](images/diagram.png)

### Options

> Note the defaults.
"""

SAMPLE_MDX = """\
---
title: Tabs
---
import { Tabs } from './tabs'
export const meta = { draft: false }

# Using tabs

<Callout type="warning" dismissible>
Be **careful**.
</Callout>

Inline <Badge label="new" /> here.
"""

SAMPLE_JSON = """\
{
  "metadata": {"title": "JSON Article", "tags": ["json"]},
  "content": [
    {"type": "heading", "level": 1, "content": "Overview"},
    {"type": "paragraph", "content": "Plain <text> & more."},
    {"type": "heading", "level": 2, "content": "Details"},
    {"type": "code", "language": "bash", "content": "ls -la"},
    {"type": "list", "items": ["one", "two"], "ordered": true},
    {"type": "image", "src": "img/shot.png", "alt": "Screenshot"},
    {"type": "callout", "calloutType": "tip", "content": "Try it."}
  ]
}
"""

SAMPLE_CSV = """\
Question,Answer,Category
How do I log in?,Use your email.,account
"Can I pay, later?","Yes, within ""30"" days.",billing
"""


@pytest.fixture(name="markdown_parser")
def markdown_parser_fixture():
    return MarkdownParser()


@pytest.fixture(name="mdx_parser")
def mdx_parser_fixture():
    return MdxParser()


@pytest.fixture(name="json_parser")
def json_parser_fixture():
    return JsonParser()


@pytest.fixture(name="csv_parser")
def csv_parser_fixture():
    return CsvParser()


@pytest.fixture(name="detector")
def detector_fixture(markdown_parser, json_parser, csv_parser, mdx_parser):
    return create_format_detector([markdown_parser, json_parser, csv_parser, mdx_parser])


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_mdx")
def sample_mdx_fixture():
    return SAMPLE_MDX


@pytest.fixture(name="sample_json")
def sample_json_fixture():
    return SAMPLE_JSON


@pytest.fixture(name="sample_csv")
def sample_csv_fixture():
    return SAMPLE_CSV
