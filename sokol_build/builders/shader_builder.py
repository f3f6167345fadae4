"""
Shader compilation via sokol-shdc
"""

from pathlib import Path
from typing import List, Optional

from ..graph import BuildGraph, BuildNode, CommandAction, NodeKind
from .base_builder import BaseBuilder

SHADERS_STEP = "shaders"


class ShaderBuilder(BaseBuilder):
    """Fans the shader compiler over the shader catalog"""

    def shdc_path(self) -> Optional[Path]:
        """The shader compiler for this host, or None when the host has none"""
        shaders = self.config.catalog.shaders
        binary = shaders.host_binaries.get(self.context.detector.host_key())
        if binary is None:
            return None
        return self.source_path(shaders.tools_dir) / binary

    def build(self, graph: BuildGraph) -> List[BuildNode]:
        """
        Register the ``shaders`` step

        Returns:
            The shader nodes (empty when the host has no shader compiler)
        """
        shaders = self.config.catalog.shaders
        step = graph.step(SHADERS_STEP, f"Compile shaders (needs {shaders.tools_dir})")

        shdc = self.shdc_path()
        if shdc is None:
            self.logger.warning("unsupported host platform, skipping shader compiler step")
            return []

        languages = ":".join(shaders.languages)
        nodes = []
        for relative in self.config.get_shader_sources():
            source = self.source_path(relative)
            output = Path(f"{source}{shaders.output_suffix}")
            cmd = [
                str(shdc),
                "-i", str(source),
                "-o", str(output),
                "-l", languages,
                "-f", shaders.output_format,
            ]
            node = graph.add(BuildNode(
                name=f"shader-{source.name}",
                kind=NodeKind.SHADER,
                action=CommandAction(cmd, cwd=self.root_dir),
                outputs=[output],
                description=f"sokol-shdc {source.name}",
            ))
            step.depend_on(node)
            nodes.append(node)
        return nodes
