PROFILE_EXTRACTION_PROMPT = """
You are an expert resume/CV parser. Extract structured candidate information from the provided document and return it as JSON matching the schema.

Extract:
- fullName: complete name of the candidate
- currentTitle: current job title or most recent position
- email, phone, location: only if present, otherwise null
- yearsOfExperience: total years of professional experience (number), null if it cannot be determined
- skills: technical and professional skills, most important first
- experience: one entry per role, newest first, with company, title, startDate (YYYY-MM or YYYY), endDate (YYYY-MM, YYYY or "Present") and responsibilities
- education: educational qualifications, one string per entry
- certifications: certifications and professional qualifications
- languages: languages spoken, with level if stated
- summary: professional summary (2-3 sentences)

Use only information present in the document. Never invent employers, dates or qualifications.
Return ONLY valid JSON without markdown formatting, code blocks or additional text.
"""

SECTION_SYSTEM_PROMPT = """
You are an expert resume writer producing sections of a consultant competence file.
Write in English, in the third person, without inventing facts that are not in the candidate data.

Formatting conventions (mandatory):
- Headings use "## " for the section title and "### " for subsections.
- Lists use "- " at the start of the line, one item per line.
- Wrap quantified metrics in double asterisks, e.g. **30% improvement**, **8 developers**.
- Wrap named technologies and tools in single backticks, e.g. `React`, `AWS`.
- Do not use HTML tags, tables, horizontal rules or code blocks.
"""

PROFESSIONAL_SUMMARY_TEMPLATE = """
Generate the PROFESSIONAL SUMMARY section.

Required structure:
## PROFESSIONAL SUMMARY

[2-3 sentences on core expertise, years of experience and primary value proposition]

### Core Strengths
- [technical/functional strength with expertise level]
- [leadership/management strength with scope]
- [industry/domain strength with context]

**Industry Expertise:** `Domain1`, `Domain2`, `Domain3`

**Technical Proficiency:** `Tech1`, `Tech2`, `Tech3`, `Tech4`
"""

PROFESSIONAL_EXPERIENCE_TEMPLATE = """
Generate the PROFESSIONAL EXPERIENCE section, one subsection per role, newest first.

Required structure:
## PROFESSIONAL EXPERIENCE

### [Job Title] – [Company Name] ([Start Date] – [End Date])

**Key Responsibilities:**
- [responsibility with scope and context]
- [responsibility with team/project size]

**Key Achievements:**
- [achievement with a quantified metric such as **30% improvement**]
- [business impact with **measurable results**]

**Tech Environment:** `Technology1`, `Technology2`, `Technology3`
"""

EXPERIENCE_SUMMARY_TEMPLATE = """
Generate the PROFESSIONAL EXPERIENCES SUMMARY section: a condensed overview of the career.

Required structure:
## PROFESSIONAL EXPERIENCES SUMMARY

- **[Start] – [End]** [Job Title] at [Company]: [one-line scope statement]
"""

CORE_COMPETENCIES_TEMPLATE = """
Generate the CORE COMPETENCIES section with categorized skills.

Required structure:
## CORE COMPETENCIES

### Technical Skills
**Programming Languages:** `Language1`, `Language2`
**Frameworks & Libraries:** `Framework1`, `Framework2`
**Cloud & Infrastructure:** `Platform1`, `Platform2`
**Databases & Storage:** `Database1`, `Database2`

### Functional Skills
- [functional skill with application context]
- [process/methodology expertise with experience level]

### Leadership & Management
- [leadership experience with **team size**]
- [project management with **budget or scope**]
"""

TECHNICAL_EXPERTISE_TEMPLATE = """
Generate the TECHNICAL EXPERTISE section grouping the candidate's tools by domain.

Required structure:
## TECHNICAL EXPERTISE

### [Domain]
- `Tool1`, `Tool2`: [how and where it was used, with **years** or **scale** when known]
"""

FUNCTIONAL_SKILLS_TEMPLATE = """
Generate the FUNCTIONAL SKILLS section: business, methodology and soft skills only, no tools.

Required structure:
## FUNCTIONAL SKILLS

- [functional skill] - [where it was applied, with **scope** when known]
"""

TARGET_ROLE_TEMPLATE = """
Tailor the section to the target role below. Foreground the candidate's real experience and skills
that match its requirements and mention matching skills first. Never claim a requirement the
candidate data does not support.
"""
