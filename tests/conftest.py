"""Pytest configuration and fixtures."""

import json

import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


@pytest.fixture
def dpkg_status_text():
    """Two stanzas from a dpkg status file."""
    return """\
Package: curl
Status: install ok installed
Architecture: amd64
Version: 7.68.0-1ubuntu2

Package: zlib1g
Architecture: amd64
Version: 1:1.2.11.dfsg-2ubuntu1
"""


@pytest.fixture
def apk_installed_text():
    """Three records from an Alpine installed database."""
    return """\
C:Q1abc=
P:musl
V:1.2.4-r2
A:x86_64
p:so:libc.musl-x86_64.so.1=1

P:busybox
V:1.36.1-r5
A:x86_64
D:so:libc.musl-x86_64.so.1
p:/bin/sh cmd:busybox=1.36.1-r5

P:alpine-baselayout
V:3.4.3-r1
A:x86_64
D:busybox /bin/sh !foo
"""


@pytest.fixture
def requirements_text():
    return """\
# comment
requests==2.31.0
Flask>=2.0,<3.0 ; python_version >= "3.8"
urllib3[socks] ~= 1.26  # trailing
-r other.txt
--index-url https://pypi.example.com/simple
numpy \\
    ==1.26.0
pkg @ https://example.com/pkg.whl
"""


@pytest.fixture
def npm_lock_v3_text():
    return json.dumps({
        "name": "app",
        "version": "1.0.0",
        "lockfileVersion": 3,
        "requires": True,
        "packages": {
            "": {
                "name": "app",
                "version": "1.0.0",
                "dependencies": {"express": "^4.18.0"},
                "devDependencies": {"jest": "^29.0.0"},
            },
            "node_modules/express": {"version": "4.18.2", "dependencies": {"debug": "2.6.9"}},
            "node_modules/express/node_modules/debug": {"version": "2.6.9", "dependencies": {"ms": "2.0.0"}},
            "node_modules/express/node_modules/ms": {"version": "2.0.0"},
            "node_modules/debug": {"version": "4.3.4", "dev": True, "dependencies": {"ms": "2.1.2"}},
            "node_modules/ms": {"version": "2.1.2", "dev": True},
            "node_modules/jest": {"version": "29.7.0", "dev": True, "dependencies": {"debug": "^4.0.0"}},
        },
    })


@pytest.fixture
def go_mod_text():
    return """\
module example.com/app

go 1.21

require (
\tgithub.com/pkg/errors v0.9.1
\tgolang.org/x/text v0.14.0 // indirect
)

require github.com/stretchr/testify v1.8.4

replace github.com/pkg/errors => github.com/pkg/errors v0.9.2

exclude golang.org/x/net v0.1.0
"""
