"""Readers for kernel command line parameters and loaded module statistics."""