"""Local judge: run solutions against test cases under several runtimes."""
