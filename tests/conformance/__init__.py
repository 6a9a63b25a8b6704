"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the TokenLock.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - unlocked equals the live queue; custody covers liabilities
2. atomicity.py - Failed operations leave no trace
3. maturity.py - Entries pay out only once their cooldown has elapsed
4. withdraw_bounds.py - The cap and the first immature entry bound each withdraw

These tests use hypothesis for property-based testing.
"""
