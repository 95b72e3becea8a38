"""
Financial Data Spreadsheet Formulas

Custom spreadsheet formulas that fetch stock quotes and World Bank
indicators and correlate the closing prices of two tickers.
"""

__version__ = "0.1.0"
