"""Core subpackage - tool resolution, argument building, process invocation, retry and artifact lookup."""
