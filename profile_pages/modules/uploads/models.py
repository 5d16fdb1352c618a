# Supabase Storage bucket: images (public)
# Optional alternative: S3 bucket from S3_BUCKET_NAME

"""
Object layout:
- <folder>/<epoch-ms>-<random>.<ext>, folder defaults to 'templates'
- Allowed extensions: jpg, jpeg, png, gif, webp (ALLOWED_IMAGE_EXTENSIONS)
- Maximum size: 10 MiB (MAX_UPLOAD_BYTES)

The bucket must exist and be public; uploads return its public URL, which is
what template and profile rows store.
"""
