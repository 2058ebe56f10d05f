class ReadTreeError(Exception):
    # base exception for all readtree errors.
    pass

class ConfigError(ReadTreeError):
    # errors related to configuration.
    pass

class ConventionError(ReadTreeError):
    # a loaded file does not export a callable taking the argument bundle.
    def __init__(self, path, kind: str, export_name: str = "tree"):
        self.path = path
        self.kind = kind
        self.export_name = export_name
        found = kind if kind == "missing" else f"a {kind}"
        super().__init__(
            f"readtree: trying to import {path}, but its `{export_name}` is {found}, "
            f"you need to make it a function like `def {export_name}(args): ...`"
        )

class ModuleLoadError(ReadTreeError):
    # errors raised while executing a module file.
    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"failed to load module file {path}: {message}")

class RootSkippedError(ReadTreeError):
    # the top-level folder carries a .skip-tree marker.
    pass

class NameCollisionError(ReadTreeError):
    # a module file and a subdirectory map to the same name.
    pass

class InfiniteRecursionError(ReadTreeError):
    # a deferred value was forced while it was still being computed.
    pass

class OutputError(ReadTreeError):
    # errors during output operations.
    pass
