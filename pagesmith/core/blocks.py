"""Built-in block library."""

from __future__ import annotations

from typing import Tuple

from .models import BlockTemplate, EditableField, FieldKind

TEXT = FieldKind.TEXT
MULTILINE = FieldKind.MULTILINE_TEXT


HERO_SIMPLE = BlockTemplate(
    template_id="hero-simple",
    name="Simple Hero",
    category="hero",
    description="A clean hero section with headline and CTA",
    markup="""\
<div class="text-center py-20 bg-gradient-to-r from-blue-600 to-purple-600 text-white">
  <h1 class="text-5xl font-bold mb-6">Build Amazing Landing Pages</h1>
  <p class="text-xl mb-8 max-w-2xl mx-auto">Create professional landing pages in minutes with our drag-and-drop builder.</p>
  <button class="bg-white text-blue-600 px-8 py-3 rounded-lg font-semibold hover:bg-gray-100 transition-colors">
    Get Started Free
  </button>
</div>""",
    preview_markup="""\
<div class="bg-blue-100 p-2 text-center text-xs">
  <div class="font-bold">Hero Section</div>
  <div class="text-gray-600">Headline + CTA</div>
</div>""",
    editable_fields=(
        EditableField("h1", TEXT, "Headline"),
        EditableField("p", MULTILINE, "Subtitle"),
        EditableField("button", TEXT, "Button Text"),
    ),
)


FEATURES_GRID = BlockTemplate(
    template_id="features-grid",
    name="Feature Grid",
    category="content",
    description="A 3-column feature grid with icons",
    markup="""\
<div class="py-16 bg-white">
  <div class="max-w-6xl mx-auto px-6">
    <h2 class="text-3xl font-bold text-center mb-12">Why Choose Us</h2>
    <div class="grid md:grid-cols-3 gap-8">
      <div class="text-center">
        <div class="w-16 h-16 bg-blue-100 rounded-full mx-auto mb-4 flex items-center justify-center">
          <span class="text-2xl">\u26a1</span>
        </div>
        <h3 class="text-xl font-semibold mb-3">Fast &amp; Easy</h3>
        <p class="text-gray-600">Build pages in minutes, not hours</p>
      </div>
      <div class="text-center">
        <div class="w-16 h-16 bg-green-100 rounded-full mx-auto mb-4 flex items-center justify-center">
          <span class="text-2xl">\U0001f3a8</span>
        </div>
        <h3 class="text-xl font-semibold mb-3">Beautiful Design</h3>
        <p class="text-gray-600">Professional templates and components</p>
      </div>
      <div class="text-center">
        <div class="w-16 h-16 bg-purple-100 rounded-full mx-auto mb-4 flex items-center justify-center">
          <span class="text-2xl">\U0001f4f1</span>
        </div>
        <h3 class="text-xl font-semibold mb-3">Mobile Ready</h3>
        <p class="text-gray-600">Responsive on all devices</p>
      </div>
    </div>
  </div>
</div>""",
    preview_markup="""\
<div class="bg-gray-50 p-2 text-center text-xs">
  <div class="font-bold">Feature Grid</div>
  <div class="text-gray-600">3 columns</div>
</div>""",
    editable_fields=(
        EditableField("h2", TEXT, "Section Title"),
    ),
)


CONTACT_FORM = BlockTemplate(
    template_id="contact-form",
    name="Contact Form",
    category="form",
    description="Simple contact form with email and message",
    markup="""\
<div class="py-16 bg-gray-50">
  <div class="max-w-2xl mx-auto px-6">
    <h2 class="text-3xl font-bold text-center mb-8">Get In Touch</h2>
    <form class="space-y-6">
      <div>
        <label class="block text-sm font-medium text-gray-700 mb-2">Name</label>
        <input type="text" name="name" class="w-full px-4 py-3 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500 focus:border-transparent" placeholder="Your name">
      </div>
      <div>
        <label class="block text-sm font-medium text-gray-700 mb-2">Email</label>
        <input type="email" name="email" class="w-full px-4 py-3 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500 focus:border-transparent" placeholder="your@email.com">
      </div>
      <div>
        <label class="block text-sm font-medium text-gray-700 mb-2">Message</label>
        <textarea rows="4" name="message" class="w-full px-4 py-3 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500 focus:border-transparent" placeholder="Your message..."></textarea>
      </div>
      <button type="submit" class="w-full bg-blue-600 text-white py-3 rounded-lg font-semibold hover:bg-blue-700 transition-colors">
        Send Message
      </button>
    </form>
  </div>
</div>""",
    preview_markup="""\
<div class="bg-blue-50 p-2 text-center text-xs">
  <div class="font-bold">Contact Form</div>
  <div class="text-gray-600">Name, Email, Message</div>
</div>""",
    editable_fields=(
        EditableField("h2", TEXT, "Form Title"),
        EditableField("button", TEXT, "Button Text"),
    ),
)


CTA_SECTION = BlockTemplate(
    template_id="cta-section",
    name="Call to Action",
    category="content",
    description="Centered CTA with background",
    markup="""\
<div class="py-20 bg-blue-600 text-white text-center">
  <div class="max-w-4xl mx-auto px-6">
    <h2 class="text-4xl font-bold mb-6">Ready to Get Started?</h2>
    <p class="text-xl mb-8">Join thousands of users who are already building amazing pages.</p>
    <button class="bg-white text-blue-600 px-8 py-4 rounded-lg font-semibold text-lg hover:bg-gray-100 transition-colors">
      Start Building Now
    </button>
  </div>
</div>""",
    preview_markup="""\
<div class="bg-blue-100 p-2 text-center text-xs">
  <div class="font-bold">CTA Section</div>
  <div class="text-gray-600">Call to Action</div>
</div>""",
    editable_fields=(
        EditableField("h2", TEXT, "CTA Headline"),
        EditableField("p", MULTILINE, "CTA Description"),
        EditableField("button", TEXT, "Button Text"),
    ),
)


FOOTER_SIMPLE = BlockTemplate(
    template_id="footer-simple",
    name="Simple Footer",
    category="footer",
    description="Clean footer with links and copyright",
    markup="""\
<footer class="bg-gray-900 text-white py-12">
  <div class="max-w-6xl mx-auto px-6">
    <div class="grid md:grid-cols-4 gap-8 mb-8">
      <div>
        <h3 class="font-bold text-lg mb-4">PageSmith</h3>
        <p class="text-gray-400">Build beautiful landing pages with ease.</p>
      </div>
      <div>
        <h4 class="font-semibold mb-4">Product</h4>
        <ul class="space-y-2 text-gray-400">
          <li><a href="#" class="hover:text-white">Features</a></li>
          <li><a href="#" class="hover:text-white">Pricing</a></li>
          <li><a href="#" class="hover:text-white">Templates</a></li>
        </ul>
      </div>
      <div>
        <h4 class="font-semibold mb-4">Company</h4>
        <ul class="space-y-2 text-gray-400">
          <li><a href="#" class="hover:text-white">About</a></li>
          <li><a href="#" class="hover:text-white">Blog</a></li>
          <li><a href="#" class="hover:text-white">Contact</a></li>
        </ul>
      </div>
      <div>
        <h4 class="font-semibold mb-4">Support</h4>
        <ul class="space-y-2 text-gray-400">
          <li><a href="#" class="hover:text-white">Help Center</a></li>
          <li><a href="#" class="hover:text-white">Documentation</a></li>
          <li><a href="#" class="hover:text-white">API</a></li>
        </ul>
      </div>
    </div>
    <div class="border-t border-gray-800 pt-8 text-center text-gray-400">
      <p>&copy; 2024 PageSmith. All rights reserved.</p>
    </div>
  </div>
</footer>""",
    preview_markup="""\
<div class="bg-gray-800 text-white p-2 text-center text-xs">
  <div class="font-bold">Footer</div>
  <div class="text-gray-300">Links &amp; Copyright</div>
</div>""",
    editable_fields=(
        EditableField("h3", TEXT, "Brand Name"),
    ),
)


DEFAULT_BLOCKS: Tuple[BlockTemplate, ...] = (
    HERO_SIMPLE,
    FEATURES_GRID,
    CONTACT_FORM,
    CTA_SECTION,
    FOOTER_SIMPLE,
)
