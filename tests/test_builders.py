from pathlib import Path

from conftest import FakeDetector, FakeProbe
from sokol_build.builders import ExampleBuilder, LibraryBuilder, ShaderBuilder, Toolchain
from sokol_build.graph import BuildGraph, NodeKind
from sokol_build.sokol_types.configuration import FeatureToggles, OptimizeMode


def _toolchain(context):
    return Toolchain.for_plan(context.plan, context.config, context.probe, context.host_os)


def test_native_toolchain_uses_host_defaults(make_context):
    context = make_context("x86_64-linux-gnu")
    assert _toolchain(context) == Toolchain(cc=["cc"], ar=["ar"])


def test_cross_toolchain_passes_target(make_context):
    context = make_context("x86_64-windows-msvc", native=False)
    toolchain = _toolchain(context)
    assert toolchain.cc == ["clang", "--target=x86_64-windows-msvc"]


def test_toolchain_from_environment(make_context):
    probe = FakeProbe(env={"CC": "ccache aarch64-linux-gnu-gcc", "AR": "aarch64-linux-gnu-ar"})
    context = make_context("aarch64-linux-gnu", probe=probe, native=False)
    toolchain = _toolchain(context)
    assert toolchain.cc == ["ccache", "aarch64-linux-gnu-gcc"]
    assert toolchain.ar == ["aarch64-linux-gnu-ar"]


def test_library_node(make_context, tmp_path):
    context = make_context("x86_64-linux-gnu")
    graph = BuildGraph()
    node = LibraryBuilder(context, _toolchain(context)).build(graph)

    assert node.name == "lib-sokol"
    assert node.kind is NodeKind.ARCHIVE
    assert node.output == context.out_dir / "lib" / "libsokol.a"

    commands = [line.split() for line in node.action.describe()]
    compiles, archive = commands[:-1], commands[-1]
    assert len(compiles) == 8
    for cmd in compiles:
        assert cmd[0] == "cc"
        assert "-DIMPL" in cmd
        assert "-DSOKOL_GLCORE33" in cmd
        assert "-DSOKOL_DISABLE_WAYLAND" in cmd
        assert "-O0" in cmd
        assert cmd.index("-DIMPL") < cmd.index("-DSOKOL_GLCORE33")
    assert compiles[0][2] == str(tmp_path / "src" / "sokol" / "c" / "sokol_log.c")
    assert archive[:3] == ["ar", "rcs", str(node.output)]
    assert len(archive) == 3 + 8


def test_library_waits_for_sdk_setup(make_context):
    context = make_context("x86_64-linux-gnu")
    graph = BuildGraph()
    builder = LibraryBuilder(context, _toolchain(context))
    setup = builder.static_library_node(graph, "setup", [], context.cache_dir / "setup.a")
    node = builder.build(graph, setup)
    assert node.dependencies == [setup]


def test_library_release_flags(make_context):
    context = make_context("x86_64-linux-gnu", optimize=OptimizeMode.RELEASE_FAST)
    node = LibraryBuilder(context, _toolchain(context)).build(BuildGraph())
    first = node.action.describe()[0].split()
    assert "-O3" in first and "-DNDEBUG" in first


def test_windows_library_name(make_context):
    context = make_context("x86_64-windows-msvc", native=False)
    builder = LibraryBuilder(context, _toolchain(context))
    assert builder.library_path.name == "sokol.lib"


def test_native_examples(make_context, config):
    context = make_context("x86_64-linux-gnu", toggles=FeatureToggles(enable_wayland=True))
    graph = BuildGraph()
    toolchain = _toolchain(context)
    library = LibraryBuilder(context, toolchain).build(graph)
    artifacts = ExampleBuilder(context, toolchain).build(graph, library)

    assert len(artifacts) == len(config.get_examples()) == 19
    link = graph.get("link-triangle")
    assert link in artifacts
    assert link.kind is NodeKind.LINK
    assert set(link.dependencies) == {library, graph.get("compile-triangle")}
    assert link.action.cmd[-2:] == ["-lxkbcommon", "-lEGL"]
    assert "-lX11" in link.action.cmd

    step = graph.get_step("run-triangle")
    run = graph.get("exec-triangle")
    assert step.dependencies == [run]
    assert run.action.cmd == [str(context.out_dir / "bin" / "triangle")]
    assert run.dependencies == [link]


def test_windows_executables(make_context):
    context = make_context("x86_64-windows-msvc", native=False)
    graph = BuildGraph()
    toolchain = _toolchain(context)
    library = LibraryBuilder(context, toolchain).build(graph)
    ExampleBuilder(context, toolchain).build(graph, library)
    link = graph.get("link-cube")
    assert link.output.name == "cube.exe"
    assert link.action.cmd[-6:] == ["-lkernel32", "-luser32", "-lgdi32", "-lole32", "-ld3d11", "-ldxgi"]
    assert graph.get("compile-cube").output.suffix == ".obj"


def test_shader_nodes(make_context, config, tmp_path):
    context = make_context(detector=FakeDetector("linux", "x86_64"))
    graph = BuildGraph()
    nodes = ShaderBuilder(context).build(graph)

    assert len(nodes) == len(config.catalog.shaders.names) == 10
    assert graph.get_step("shaders").dependencies == nodes
    cube = graph.get("shader-cube.glsl")
    source = tmp_path / "src" / "examples" / "shaders" / "cube.glsl"
    assert cube.action.cmd == [
        str(tmp_path / ".." / "sokol-tools-bin" / "bin" / "linux" / "sokol-shdc"),
        "-i", str(source),
        "-o", f"{source}.h",
        "-l", "glsl330:metal_macos:hlsl4:glsl300es:wgsl",
        "-f", "sokol",
    ]
    assert cube.output == Path(f"{source}.h")


def test_shader_binary_per_host(make_context):
    context = make_context(detector=FakeDetector("macos", "aarch64"))
    assert ShaderBuilder(context).shdc_path().parts[-2:] == ("osx_arm64", "sokol-shdc")

    context = make_context(detector=FakeDetector("windows", "x86_64"))
    assert ShaderBuilder(context).shdc_path().name == "sokol-shdc.exe"


def test_unknown_host_has_empty_shader_step(make_context):
    context = make_context(detector=FakeDetector("freebsd", "x86_64"))
    graph = BuildGraph()
    assert ShaderBuilder(context).build(graph) == []
    assert graph.get_step("shaders").dependencies == []
