"""
Currency market cycle finder.
Searches currency.poe.trade offers for trade loops that end in more currency than they started with.
"""
