"""
LEAN Regression Kit

A harness for running self-describing regression algorithms through the
LEAN engine and checking every run against the baseline each algorithm
declares for itself.

Usage:
    regression list
    regression run --language Python
    regression show CSharp/BasicTemplateAlgorithm
"""

__version__ = "0.1.0"
__author__ = "Regression Kit"
