"""
Test suite for the Life in the UK quiz scraper.

The tests drive the page automaton, the scheduler and the credential store
against fake Playwright objects, so no browser or network is needed.
"""
