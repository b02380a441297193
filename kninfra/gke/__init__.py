"""Cluster addon configuration and validated cluster creation requests."""