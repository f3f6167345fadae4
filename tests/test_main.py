import pytest

from conftest import FakeDetector, FakeProbe
from sokol_build.main import BuildSystem, main
from sokol_build.sokol_types.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("CC", "AR", "CROSS_COMPILE", "EMSDK", "SOKOL_BUILD_MAX_JOBS"):
        monkeypatch.delenv(name, raising=False)


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_build_dry_run(tmp_path):
    argv = ["build", "--dry-run", "--target", "x86_64-windows-msvc", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 0


def test_build_single_step(tmp_path):
    argv = ["build", "--step", "run-clear", "--dry-run",
            "--target", "x86_64-linux-gnu", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 0


def test_run_dry_run(tmp_path):
    argv = ["run", "triangle", "--dry-run", "--target", "aarch64-macos", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 0


def test_run_unknown_sample(tmp_path):
    argv = ["run", "teapot", "--dry-run", "--target", "x86_64-linux-gnu", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 1


def test_run_needs_sample():
    assert _exit_code(["run"]) == 2


@pytest.mark.parametrize("backend", ["metal", "d3d11"])
def test_android_with_other_backend_fails(tmp_path, backend):
    argv = ["build", "--target", "aarch64-linux-android", "--backend", backend,
            "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 1
    assert not (tmp_path / "build").exists()


def test_linux_without_window_system_fails(tmp_path):
    argv = ["info", "--target", "x86_64-linux-gnu", "--no-x11", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 1


def test_wasi_target_fails(tmp_path):
    argv = ["build", "--dry-run", "--target", "wasm32-wasi", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 1


def test_web_build_with_sdk(tmp_path):
    sdk = tmp_path / "emsdk"
    sdk.mkdir()
    (sdk / ".emscripten").write_text("")
    argv = ["build", "--dry-run", "--target", "wasm32-emscripten", "--emsdk", str(sdk),
            "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 0


def test_web_build_without_sdk(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    argv = ["build", "--dry-run", "--target", "wasm32-emscripten", "--root-dir", str(tmp_path)]
    assert _exit_code(argv) == 1


def test_info(tmp_path, capsys):
    main(["info", "--target", "x86_64-windows-msvc", "--root-dir", str(tmp_path)])
    out = capsys.readouterr().out
    assert "Backend: d3d11" in out
    assert "-ld3d11" not in out
    assert "d3d11 dxgi" in out


def test_steps(tmp_path, capsys):
    main(["steps", "--target", "x86_64-linux-gnu", "--wayland", "--root-dir", str(tmp_path)])
    out = capsys.readouterr().out
    assert "install" in out
    assert "run-debugtext-userfont" in out


def test_steps_are_listed_without_log_prefix(tmp_path, capsys):
    main(["steps", "--target", "x86_64-linux-gnu", "--root-dir", str(tmp_path)])
    lines = capsys.readouterr().out.splitlines()
    step_lines = [line for line in lines if line.strip().startswith("run-triangle")]
    assert len(step_lines) == 1
    assert step_lines[0].startswith("  run-triangle")
    assert "[INFO]" not in step_lines[0]


def test_info_goes_to_log_file(tmp_path):
    log_file = tmp_path / "build.log"
    main(["info", "--target", "x86_64-linux-gnu", "--root-dir", str(tmp_path),
          "--log-file", str(log_file)])
    assert "Backend: gl" in log_file.read_text()


def _build_system(tmp_path, **kwargs):
    kwargs.setdefault("probe", FakeProbe(cpus=6))
    kwargs.setdefault("target", "x86_64-linux-gnu")
    kwargs.setdefault("detector", FakeDetector("linux", "x86_64"))
    return BuildSystem(root_dir=tmp_path, dry_run=True, **kwargs)


@pytest.mark.parametrize("backend", ["d3d11", "metal"])
def test_android_rejection_builds_no_graph(tmp_path, monkeypatch, backend):
    created = []

    def record_orchestrator(*args, **kwargs):
        created.append(args)

    monkeypatch.setattr("sokol_build.main.BuildOrchestrator", record_orchestrator)
    with pytest.raises(ConfigurationError, match="GLES3"):
        _build_system(tmp_path, target="aarch64-linux-android", backend=backend)
    assert created == []


def test_jobs_default_to_cpu_count(tmp_path):
    assert _build_system(tmp_path).jobs == 6


def test_jobs_from_environment(tmp_path):
    probe = FakeProbe(env={"SOKOL_BUILD_MAX_JOBS": "3"}, cpus=6)
    assert _build_system(tmp_path, probe=probe).jobs == 3


def test_invalid_jobs_environment_is_ignored(tmp_path):
    probe = FakeProbe(env={"SOKOL_BUILD_MAX_JOBS": "many"}, cpus=6)
    assert _build_system(tmp_path, probe=probe).jobs == 6


def test_explicit_jobs_win(tmp_path):
    probe = FakeProbe(env={"SOKOL_BUILD_MAX_JOBS": "3"})
    assert _build_system(tmp_path, probe=probe, jobs=2).jobs == 2
    with pytest.raises(ConfigurationError):
        _build_system(tmp_path, jobs=0)


def test_output_directories(tmp_path):
    bs = _build_system(tmp_path, out_dir=tmp_path / "dist")
    assert bs.out_dir == tmp_path / "dist"
    assert bs.cache_dir == tmp_path.resolve() / "build" / "cache"
    assert bs.build()
