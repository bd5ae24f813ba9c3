# Supabase table: proyectos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (unique, not null) - also the name of the project's storage bucket
- description: text (nullable)
- files: jsonb (default: '[]') - [{"name": str, "size": float (MB), "url": str (signed URL)}]
- tableData: jsonb (default: '{}') - {question_text: [{"name": str, "respuesta": str}]}
- created_at: timestamp (default: now())

Storage: one public bucket per project, named after proyectos.name,
holding the uploaded PDF files under their original file names.
"""
