# ABOUTME: Ebook container readers. Only EPUB is parsed; other formats use defaults.
