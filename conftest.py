"""
Root pytest configuration.

Keeps the rootdir at the repository root so ``tests`` resolves as a
package for shared fixtures.
"""
