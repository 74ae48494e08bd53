import httpx
import pytest

from interleave_pdf import deps
from interleave_pdf.errors import DependencyUnavailableError


def pypi_client(status=200, payload=None):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/pypi/PyPDF2/json"
        return httpx.Response(status, json=payload if payload is not None else {"info": {"version": "3.0.1"}})
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def missing_then_present(monkeypatch):
    state = iter([False, True])
    monkeypatch.setattr(deps, "codec_available", lambda: next(state))


def test_codec_available_with_pypdf2_installed():
    assert deps.codec_available()


def test_noop_when_installed():
    def boom(prompt):
        raise AssertionError("should not prompt")
    deps.ensure_codec(boom, installer=lambda v: pytest.fail("should not install"))


def test_resolve_latest_version():
    assert deps.resolve_latest_version(pypi_client()) == "3.0.1"


def test_installs_resolved_version_after_confirm(missing_then_present):
    prompts, installed = [], []

    def confirm(prompt):
        prompts.append(prompt)
        return True

    deps.ensure_codec(confirm, client=pypi_client(), installer=installed.append)

    assert installed == ["3.0.1"]
    assert len(prompts) == 1 and "PyPDF2" in prompts[0]


def test_declined_prompt_raises_without_contacting_pypi(monkeypatch):
    monkeypatch.setattr(deps, "codec_available", lambda: False)
    requests, installed = [], []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"info": {"version": "3.0.1"}})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(DependencyUnavailableError, match="declined"):
        deps.ensure_codec(lambda p: False, client=client, installer=installed.append)
    assert requests == []
    assert installed == []


def test_prompt_comes_before_registry_lookup(monkeypatch):
    monkeypatch.setattr(deps, "codec_available", lambda: False)
    events = []

    def handler(request):
        events.append("lookup")
        return httpx.Response(503)

    def confirm(prompt):
        events.append("prompt")
        return True

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(DependencyUnavailableError, match="PyPI"):
        deps.ensure_codec(confirm, client=client)
    assert events == ["prompt", "lookup"]


def test_registry_error_raises(monkeypatch):
    monkeypatch.setattr(deps, "codec_available", lambda: False)
    with pytest.raises(DependencyUnavailableError, match="PyPI"):
        deps.ensure_codec(lambda p: True, client=pypi_client(status=503, payload={}))


def test_registry_payload_without_version_raises(monkeypatch):
    monkeypatch.setattr(deps, "codec_available", lambda: False)
    with pytest.raises(DependencyUnavailableError):
        deps.ensure_codec(lambda p: True, client=pypi_client(payload={"releases": {}}))


def test_installer_os_error_raises(monkeypatch):
    monkeypatch.setattr(deps, "codec_available", lambda: False)

    def broken(version):
        raise FileNotFoundError("python")

    with pytest.raises(DependencyUnavailableError, match="could not install"):
        deps.ensure_codec(lambda p: True, client=pypi_client(), installer=broken)


def test_still_missing_after_install_raises(monkeypatch):
    monkeypatch.setattr(deps, "codec_available", lambda: False)
    with pytest.raises(DependencyUnavailableError, match="still not importable"):
        deps.ensure_codec(lambda p: True, client=pypi_client(), installer=lambda v: None)


def test_install_codec_reports_pip_failure(monkeypatch):
    class Done:
        returncode = 1
        stderr = "No matching distribution\n"

    calls = []

    def fake_run(cmd, **kw):
        calls.append(cmd)
        return Done()

    monkeypatch.setattr(deps.subprocess, "run", fake_run)
    with pytest.raises(DependencyUnavailableError, match="No matching distribution"):
        deps.install_codec("9.9.9", python="/usr/bin/python3")
    assert calls == [["/usr/bin/python3", "-m", "pip", "install", "PyPDF2==9.9.9"]]
