"""Shared fixtures for StubServer tests."""

import pytest


@pytest.fixture
def stub_files(tmp_path):
    """Header and body files for a small stub set."""
    files = {
        'h1': tmp_path / 'status.headers',
        'b1': tmp_path / 'status.json',
        'notfound': tmp_path / 'notfound.txt',
        'users_body': tmp_path / 'users.json',
    }
    files['h1'].write_text("X-Test: value1\nY-Test: value2")
    files['b1'].write_text('{"status": "created"}')
    files['notfound'].write_text("not found")
    files['users_body'].write_text('[{"id": 1}]')
    return files


@pytest.fixture
def stub_definitions(stub_files):
    """Raw definitions as they come out of the YAML loader."""
    return {
        'GET|status': {
            'httpcode': 201,
            'header': str(stub_files['h1']),
            'body': str(stub_files['b1']),
        },
        'GET|api/users': {
            'httpcode': 200,
            'body': str(stub_files['users_body']),
        },
        'default|default': {
            'httpcode': 404,
            'body': str(stub_files['notfound']),
        },
    }


@pytest.fixture
def config_file(tmp_path, stub_files):
    """YAML stub-definition file on disk."""
    path = tmp_path / 'stubs.yaml'
    path.write_text(
        "GET|status:\n"
        "  httpcode: 201\n"
        f"  header: {stub_files['h1']}\n"
        f"  body: {stub_files['b1']}\n"
        "\n"
        "GET|api/users:\n"
        "  httpcode: 200\n"
        f"  body: {stub_files['users_body']}\n"
        "\n"
        "default|default:\n"
        "  httpcode: 404\n"
        f"  body: {stub_files['notfound']}\n"
    )
    return path
