"""Jinja2 sources for the printable ticket documents."""

_STATUS_BADGE_CSS = """
            .status-badge {
                display: inline-block;
                padding: {{ badge_padding }};
                border-radius: {{ badge_radius }};
                font-size: {{ badge_font }};
                font-weight: bold;
                text-transform: uppercase;
                margin-left: {{ badge_margin }};
            }

            .status-open {
                background-color: #fef3c7;
                color: #92400e;
                border: {{ badge_border }} solid #f59e0b;
            }

            .status-in-progress {
                background-color: #dbeafe;
                color: #1e40af;
                border: {{ badge_border }} solid #3b82f6;
            }

            .status-closed {
                background-color: #d1fae5;
                color: #065f46;
                border: {{ badge_border }} solid #10b981;
            }
"""

TICKET_DOCUMENT = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Service Ticket - {{ ticket.id | short_id }}</title>
    <style>
            @page {
                size: A6;
                margin: 8mm;
            }

            * {
                margin: 0;
                padding: 0;
                box-sizing: border-box;
            }

            body {
                font-family: 'Arial', sans-serif;
                font-size: 10px;
                line-height: 1.3;
                color: #000;
                background: white;
                width: 105mm;
                height: 148mm;
                padding: 5mm;
            }

            .ticket-header {
                text-align: center;
                border-bottom: 2px solid #000;
                padding-bottom: 3mm;
                margin-bottom: 4mm;
            }

            .ticket-title { font-size: 14px; font-weight: bold; margin-bottom: 2mm; }
            .ticket-id { font-size: 12px; font-weight: bold; color: #333; }
            .ticket-date { font-size: 9px; color: #666; margin-top: 1mm; }
            .section { margin-bottom: 3mm; }

            .section-title {
                font-size: 9px;
                font-weight: bold;
                text-transform: uppercase;
                border-bottom: 1px solid #ccc;
                padding-bottom: 1mm;
                margin-bottom: 2mm;
            }

            .field { display: flex; margin-bottom: 1mm; }
            .field-label { font-weight: bold; min-width: 25mm; font-size: 8px; }
            .field-value { flex: 1; font-size: 8px; word-break: break-word; }
{% with badge_padding="1mm 2mm", badge_radius="2mm", badge_font="7px", badge_margin="2mm", badge_border="1px" %}{% include "status_badge.css" %}{% endwith %}
            .problem-description {
                background-color: #f9fafb;
                border: 1px solid #e5e7eb;
                padding: 2mm;
                border-radius: 1mm;
                font-size: 8px;
                line-height: 1.4;
                margin-top: 1mm;
                white-space: pre-wrap;
            }

            .footer {
                position: absolute;
                bottom: 5mm;
                left: 5mm;
                right: 5mm;
                text-align: center;
                font-size: 7px;
                color: #666;
                border-top: 1px solid #ccc;
                padding-top: 2mm;
            }

            @media print {
                body {
                    -webkit-print-color-adjust: exact;
                    print-color-adjust: exact;
                }
            }
    </style>
</head>
<body>
    <div class="ticket-header">
        <div class="ticket-title">SERVICE TICKET</div>
        <div class="ticket-id">#{{ ticket.id | short_id }}</div>
        <div class="ticket-date">Created: {{ ticket.created_at | datetime_long }}</div>
    </div>

    <div class="section">
        <div class="section-title">Customer Information</div>
        <div class="field"><div class="field-label">Name:</div><div class="field-value">{{ ticket.customer_name }}</div></div>
        <div class="field"><div class="field-label">Contact:</div><div class="field-value">{{ ticket.contact_number }}</div></div>
    </div>

    <div class="section">
        <div class="section-title">Product Information</div>
        <div class="field"><div class="field-label">Category:</div><div class="field-value">{{ ticket.product_category }}</div></div>
        <div class="field"><div class="field-label">Model:</div><div class="field-value">{{ ticket.product_model }}</div></div>
        <div class="field"><div class="field-label">Serial:</div><div class="field-value">{{ ticket.serial_number }}</div></div>
    </div>

    <div class="section">
        <div class="section-title">Issue Details</div>
        <div class="field">
            <div class="field-label">Status:</div>
            <div class="field-value">
                {{ ticket.status | status_text }}
                <span class="status-badge status-{{ ticket.status.value }}">{{ ticket.status.value }}</span>
            </div>
        </div>
        <div class="field">
            <div class="field-label">Problem:</div>
            <div class="field-value"><div class="problem-description">{{ ticket.problem }}</div></div>
        </div>
    </div>

    <div class="section">
        <div class="section-title">Reference Information</div>
        <div class="field"><div class="field-label">Ticket ID:</div><div class="field-value">{{ ticket.id }}</div></div>
        <div class="field"><div class="field-label">Last Updated:</div><div class="field-value">{{ ticket.updated_at | datetime_long }}</div></div>
    </div>

    <div class="footer">
        <div>Keep this ticket for your records</div>
        <div>For support, contact us with ticket #{{ ticket.id | short_id }}</div>
    </div>
</body>
</html>
"""

LABEL_DOCUMENT = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Service Label - {{ ticket.id | short_id }}</title>
    <style>
            @page {
                size: 100mm 50mm;
                margin: 2mm;
            }

            * {
                margin: 0;
                padding: 0;
                box-sizing: border-box;
            }

            body {
                font-family: 'Arial', sans-serif;
                font-size: 8px;
                line-height: 1.2;
                color: #000;
                background: white;
                width: 100mm;
                height: 50mm;
                padding: 3mm;
                display: flex;
                flex-direction: column;
            }

            .label-header {
                text-align: center;
                border-bottom: 1px solid #000;
                padding-bottom: 2mm;
                margin-bottom: 2mm;
            }

            .label-title { font-size: 10px; font-weight: bold; }
            .ticket-id { font-size: 14px; font-weight: bold; margin: 1mm 0; }
            .label-body { display: flex; flex-direction: column; gap: 1mm; flex: 1; }
            .info-row { display: flex; align-items: flex-start; }
            .info-label { font-weight: bold; min-width: 18mm; font-size: 7px; }
            .info-value { flex: 1; font-size: 7px; word-break: break-word; }
{% with badge_padding="0.5mm 1.5mm", badge_radius="1mm", badge_font="6px", badge_margin="1mm", badge_border="0.5px" %}{% include "status_badge.css" %}{% endwith %}
            .label-footer {
                border-top: 1px solid #ccc;
                padding-top: 1mm;
                text-align: center;
                font-size: 6px;
                color: #666;
                margin-top: auto;
            }

            @media print {
                body {
                    -webkit-print-color-adjust: exact;
                    print-color-adjust: exact;
                }
            }
    </style>
</head>
<body>
    <div class="label-header">
        <div class="label-title">SERVICE LABEL</div>
        <div class="ticket-id">#{{ ticket.id | short_id }}</div>
    </div>

    <div class="label-body">
        <div class="info-row"><div class="info-label">Customer:</div><div class="info-value">{{ ticket.customer_name }}</div></div>
        <div class="info-row"><div class="info-label">Contact:</div><div class="info-value">{{ ticket.contact_number }}</div></div>
        <div class="info-row"><div class="info-label">Category:</div><div class="info-value">{{ ticket.product_category }}</div></div>
        <div class="info-row"><div class="info-label">Model:</div><div class="info-value">{{ ticket.product_model }}</div></div>
        <div class="info-row"><div class="info-label">Serial:</div><div class="info-value">{{ ticket.serial_number }}</div></div>
        <div class="info-row">
            <div class="info-label">Status:</div>
            <div class="info-value"><span class="status-badge status-{{ ticket.status.value }}">{{ ticket.status.value | upper }}</span></div>
        </div>
    </div>

    <div class="label-footer">
        <div>Date: {{ ticket.created_at | date_short }}</div>
    </div>
</body>
</html>
"""

# Inline-styled variant for embedding in another page or a PDF converter.
TICKET_FRAGMENT = """<div style="width: 105mm; height: 148mm; padding: 5mm; font-family: Arial, sans-serif; font-size: 10px; background: white;">
  <div style="text-align: center; border-bottom: 2px solid #000; padding-bottom: 3mm; margin-bottom: 4mm;">
    <div style="font-size: 14px; font-weight: bold; margin-bottom: 2mm;">SERVICE TICKET</div>
    <div style="font-size: 12px; font-weight: bold; color: #333;">#{{ ticket.id | short_id }}</div>
    <div style="font-size: 9px; color: #666; margin-top: 1mm;">Created: {{ ticket.created_at | datetime_long }}</div>
  </div>
{% for title, rows in sections %}
  <div style="margin-bottom: 3mm;">
    <div style="font-size: 9px; font-weight: bold; text-transform: uppercase; border-bottom: 1px solid #ccc; padding-bottom: 1mm; margin-bottom: 2mm;">{{ title }}</div>
{% for label, value in rows %}
    <div style="display: flex; margin-bottom: 1mm;">
      <div style="font-weight: bold; min-width: 25mm; font-size: 8px;">{{ label }}:</div>
      <div style="flex: 1; font-size: 8px;">{{ value }}</div>
    </div>
{% endfor %}
  </div>
{% endfor %}
  <div style="margin-bottom: 1mm;">
    <div style="font-weight: bold; font-size: 8px; margin-bottom: 1mm;">Problem:</div>
    <div style="background-color: #f9fafb; border: 1px solid #e5e7eb; padding: 2mm; border-radius: 1mm; font-size: 8px; line-height: 1.4;">{{ ticket.problem }}</div>
  </div>
  <div style="position: absolute; bottom: 5mm; left: 5mm; right: 5mm; text-align: center; font-size: 7px; color: #666; border-top: 1px solid #ccc; padding-top: 2mm;">
    <div>Keep this ticket for your records</div>
    <div>For support, contact us with ticket #{{ ticket.id | short_id }}</div>
  </div>
</div>
"""

TEMPLATES: dict[str, str] = {
    "status_badge.css": _STATUS_BADGE_CSS,
    "ticket.html": TICKET_DOCUMENT,
    "label.html": LABEL_DOCUMENT,
    "ticket_fragment.html": TICKET_FRAGMENT,
}
