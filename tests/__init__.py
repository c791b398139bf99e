"""
Test suite for the quiz import pipeline.

All network access is replaced by the fake agents in ``tests.fakes``:
- Bot detection and the fetch ladder
- State extraction and the deep structural finder
- Platform normalizers and question types
- Orchestration and discovery reports
- Configuration, CSV output and the command line
"""
