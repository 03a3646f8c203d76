"""typetester - upload fonts and preview them under adjustable typography."""
