from component_tree.build_tree import BuildResult, build_app, build_app_async, build_tree, build_tree_async

__all__ = ["BuildResult", "build_app", "build_app_async", "build_tree", "build_tree_async"]
