"""Services: document store, query pipeline, editor, clipboard and history."""
