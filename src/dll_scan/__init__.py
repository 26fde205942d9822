"""Audit deployed assembly versions across directory trees and zip archives."""

__version__ = "0.1.0"
