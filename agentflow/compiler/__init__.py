"""Artifact compilers: branch-map and module-list strategies."""

from agentflow.compiler.base import ArtifactCompiler, CompileResult
from agentflow.compiler.branch_map import BranchMapCompiler
from agentflow.compiler.module_list import ModuleListCompiler
from agentflow.config import CompilerConfig

COMPILERS: dict[str, type[ArtifactCompiler]] = {
    BranchMapCompiler.name: BranchMapCompiler,
    ModuleListCompiler.name: ModuleListCompiler,
}


def get_compiler(
    target: str | None = None,
    config: CompilerConfig | None = None,
) -> ArtifactCompiler:
    """
    Create a compiler for a strategy name.

    Args:
        target: "branch-map" or "module-list" (defaults to the configured target)
        config: Compiler settings (defaults to ~/.agentflow/configuration.json)

    Raises:
        ValueError: Unknown strategy name
    """
    config = config or CompilerConfig()
    target = target or config.default_target
    if target == ModuleListCompiler.name:
        return ModuleListCompiler(workspace=config.workspace, max_nodes=config.max_nodes)
    if target == BranchMapCompiler.name:
        return BranchMapCompiler(max_nodes=config.max_nodes)
    raise ValueError(f"Unknown compile target '{target}'. Valid: {sorted(COMPILERS)}")


__all__ = [
    "ArtifactCompiler",
    "CompileResult",
    "BranchMapCompiler",
    "ModuleListCompiler",
    "COMPILERS",
    "get_compiler",
]
