from mrelease.core.deploy.abc import Deployer

__all__ = ["Deployer"]
