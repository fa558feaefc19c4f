#!/usr/bin/env python3
"""
Simple launcher script for the currency cycle finder.
"""
from poe_arbitrage.main import cli

if __name__ == '__main__':
    cli()
