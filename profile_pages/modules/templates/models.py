# Supabase tables: profile_templates, template_sections,
# template_section_items, template_footer_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profile_templates:
- id: uuid (primary key)
- slug: text (unique, not null) - URL key, not changed after creation
- name: text (not null)
- description: text (nullable)
- hero_image: text (nullable)
- hero_image_position: text (nullable, e.g. 'center', 'top')
- kakao_link, phone_link: text (nullable) - contact deep-links
- intro_message: text (nullable)
- intro_items: text (nullable) - JSON list of {emoji, text}
- phone_number: text (nullable)
- footer_text: text (nullable)
- footer_checklist_items: text (nullable) - JSON list of strings
- footer2_title: text (nullable)
- footer2_buttons: text (nullable) - JSON list of {type, label, url},
  type in kakao | phone | blog | instagram
- section_title: text (nullable) - trusted HTML heading
- verified: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

template_sections:
- id: uuid (primary key)
- template_id: uuid (foreign key to profile_templates.id, on delete cascade)
- title: text (not null)
- order_index: integer (default: 0) - not compacted on delete
- created_at, updated_at: timestamp

template_section_items:
- id: uuid (primary key)
- section_id: uuid (foreign key to template_sections.id, on delete cascade)
- text: text (not null)
- order_index: integer (default: 0)
- created_at: timestamp

template_footer_items:
- id: uuid (primary key)
- template_id: uuid (foreign key to profile_templates.id, on delete cascade)
- emoji: text (nullable)
- title: text (not null)
- description: text (nullable)
- image: text (nullable) - single icon URL
- images: text (nullable) - JSON list of gallery URLs
- order_index: integer (default: 0)
- created_at, updated_at: timestamp

JSON list columns may come back either as text or already decoded
(jsonb); mappers.parse_json_list accepts both.
"""
