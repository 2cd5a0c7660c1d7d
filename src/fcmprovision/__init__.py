"""
fcmprovision - provisions push-notification configuration files into the
native Android and iOS projects of a React Native app before it is built.
"""

from fcmprovision.orchestrator import pre_build, run_pre_build

__all__ = ["pre_build", "run_pre_build"]
