"""Tests for SearchPathResolver."""

import os
import sys
import struct
import tempfile
import threading
import time
import zipfile
from pathlib import Path

from searchpath import PathListProvider
from searchpath import SearchPathResolver
from searchpath import SearchPathSettings
from searchpath import UnsupportedProviderKind
from searchpath import get_search_path
from searchpath import use_context_provider

NO_FALLBACK = SearchPathSettings(fallback_env_var=None)


class CountingProvider(PathListProvider):
    """List provider that records how often it is asked."""

    def __init__(self, entries=None, parent=None, delay=0.0):
        super().__init__(entries, parent)
        self.calls = 0
        self.delay = delay

    def get_search_path(self):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return super().get_search_path()


def _write_archive(path: Path, class_path: str | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        manifest = "Manifest-Version: 1.0\n"
        if class_path is not None:
            manifest += f"Class-Path: {class_path}\n"
        zf.writestr("META-INF/MANIFEST.MF", manifest)
    return path


def _dirs(base: Path, *names: str) -> list[Path]:
    paths = []
    for name in names:
        (base / name).mkdir(parents=True, exist_ok=True)
        paths.append(base / name)
    return paths


def _corrupt_manifest(path: Path) -> Path:
    """Damage the compressed bytes of the manifest inside a deflated archive."""
    with zipfile.ZipFile(path) as zf:
        info = zf.getinfo("META-INF/MANIFEST.MF")
    data = bytearray(path.read_bytes())
    name_len, extra_len = struct.unpack("<HH", data[info.header_offset + 26 : info.header_offset + 30])
    start = info.header_offset + 30 + name_len + extra_len
    data[start] ^= 0xFF
    path.write_bytes(bytes(data))
    return path


def test_override_with_manifest_dependency():
    """Test that override expands manifests with dependencies first."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        dep = _write_archive(base / "c" / "y.jar")
        app = _write_archive(base / "a" / "x.jar", class_path=str(dep))
        (b,) = _dirs(base, "b")

        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=PathListProvider())
        result = resolver.override(f"{app}{os.pathsep}{b}")

        assert result == (dep, app, b)
        assert resolver.resolve() == (dep, app, b)
        assert resolver.is_resolved


def test_override_empty():
    """Test that an empty override resolves to nothing."""
    system = CountingProvider(["/should/not/be/read"])
    resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system)

    assert resolver.override("") == ()
    assert resolver.resolve() == ()
    assert system.calls == 0


def test_duplicate_directory_from_two_providers():
    """Test that a directory contributed twice appears once, at the first position."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        shared, first, second = _dirs(base, "shared", "first", "second")

        system = PathListProvider([str(first), str(shared)])
        caller = PathListProvider([str(second), shared.as_uri()])

        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system, caller_provider=caller)

        assert resolver.resolve() == (first, shared, second)


def test_resolve_is_cached():
    """Test that a second resolve performs no provider access."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        (a,) = _dirs(base, "a")
        system = CountingProvider([str(a)])

        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system)

        first = resolver.resolve()
        (base / "late").mkdir()
        system.entries.append(str(base / "late"))
        second = resolver.resolve()

        assert first == second == (a,)
        assert first is second
        assert system.calls == 1


def test_reset_rescans():
    """Test that reset starts a new generation and the next resolve rescans."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        a, late = _dirs(base, "a", "late")
        system = CountingProvider([str(a)])

        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system)
        resolver.resolve()
        generation = resolver.generation

        system.entries.append(str(late))
        resolver.reset()

        assert not resolver.is_resolved
        assert resolver.generation == generation + 1
        assert resolver.resolve() == (a, late)
        assert system.calls == 2


def test_override_replaces_provider_result():
    """Test that override discards a previous provider-based result."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        a, b = _dirs(base, "a", "b")

        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=PathListProvider([str(a)]))
        assert resolver.resolve() == (a,)

        assert resolver.override(str(b)) == (b,)
        assert resolver.resolve() == (b,)
        assert resolver.enumeration_results == ()


def test_provider_order(monkeypatch):
    """Test system, caller chain (outermost first), context, then fallback."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        system_dir, root_dir, caller_dir, context_dir, env_dir = _dirs(
            base, "system", "root", "caller", "context", "env"
        )

        system = PathListProvider([str(system_dir)])
        root = PathListProvider([str(root_dir)])
        caller = PathListProvider([str(caller_dir)], parent=root)
        context = PathListProvider([str(context_dir)])
        settings = SearchPathSettings(fallback_env_var="SEARCHPATH_TEST_FALLBACK")

        resolver = SearchPathResolver(settings=settings, system_provider=system, caller_provider=caller)

        monkeypatch.setenv("SEARCHPATH_TEST_FALLBACK", f"{env_dir}{os.pathsep}{system_dir}")
        with use_context_provider(context):
            result = resolver.resolve()

        assert result == (system_dir, root_dir, caller_dir, context_dir, env_dir)


def test_fallback_env_var(monkeypatch):
    """Test that the fallback variable catches entries providers missed."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        (extra,) = _dirs(base, "extra")
        monkeypatch.setenv("SEARCHPATH_TEST_FALLBACK", f"{os.pathsep}{extra}")

        settings = SearchPathSettings(fallback_env_var="SEARCHPATH_TEST_FALLBACK")
        resolver = SearchPathResolver(settings=settings, system_provider=PathListProvider())

        assert resolver.resolve() == (extra,)


def test_unknown_provider_contributes_nothing():
    """Test that an unsupported provider doesn't break resolution."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        (a,) = _dirs(base, "a")

        class Mystery:
            parent = None

        resolver = SearchPathResolver(
            settings=NO_FALLBACK,
            system_provider=PathListProvider([str(a)]),
            caller_provider=Mystery(),
        )

        assert resolver.resolve() == (a,)
        errors = [r.error for r in resolver.enumeration_results if not r.ok]
        assert len(errors) == 1
        assert isinstance(errors[0], UnsupportedProviderKind)


def test_runtime_archives_excluded():
    """Test that a runtime archive never appears even though it exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        lib = base / "runtime" / "lib"
        lib.mkdir(parents=True)
        with zipfile.ZipFile(lib / "rt.jar", "w") as zf:
            zf.writestr("META-INF/MANIFEST.MF", "Implementation-Title: Java Runtime Environment\n")
        internal = _write_archive(lib / "charsets.jar")
        app = _write_archive(base / "app.jar")

        system = PathListProvider([str(lib / "rt.jar"), str(internal), str(app)])
        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system)

        assert resolver.resolve() == (app,)
        assert resolver.known_runtime_dirs == frozenset({str(lib)})


def test_rejected_identifiers_never_appear():
    """Test that remote and archive-internal identifiers produce no entries."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        app = _write_archive(base / "app.jar")

        system = PathListProvider(
            [
                "https://example.com/remote.jar",
                f"jar:{app.as_uri()}!/com/example/",
                "/nonexistent/path",
            ]
        )
        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system)

        assert resolver.resolve() == ()


def test_concurrent_first_resolve_runs_once():
    """Test that concurrent first callers share one resolution run."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        (a,) = _dirs(base, "a")
        system = CountingProvider([str(a)], delay=0.05)
        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=system)

        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(resolver.resolve())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert system.calls == 1
        assert len(results) == 8
        assert all(r == (a,) for r in results)


def test_get_search_path_uses_sys_path(monkeypatch):
    """Test the one-shot helper with the default system provider."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        a, caller_dir = _dirs(base, "a", "caller")
        monkeypatch.setattr(sys, "path", [str(a)])

        result = get_search_path(
            caller_provider=PathListProvider([str(caller_dir)]),
            settings=NO_FALLBACK,
        )

        assert result == (a, caller_dir)


def test_malformed_identifiers_are_skipped(monkeypatch):
    """Test that bad URL syntax from providers, the fallback variable or override yields no entries."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        (a,) = _dirs(base, "a")
        monkeypatch.setenv("SEARCHPATH_TEST_FALLBACK", "//[x/lib")

        settings = SearchPathSettings(fallback_env_var="SEARCHPATH_TEST_FALLBACK")
        resolver = SearchPathResolver(
            settings=settings,
            system_provider=PathListProvider(["//[x/lib", str(a), "file://[::1/a"]),
        )

        assert resolver.resolve() == (a,)
        assert resolver.override("file://[::1/a") == ()


def test_override_with_corrupt_manifest():
    """Test that an archive with an undecompressable manifest doesn't abort resolution."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir).resolve()
        app = base / "app.jar"
        with zipfile.ZipFile(app, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\nCreated-By: test\n" * 20)
        _corrupt_manifest(app)

        resolver = SearchPathResolver(settings=NO_FALLBACK, system_provider=PathListProvider())

        assert resolver.override(str(app)) == (app,)
